"""
Command line tool for WardenMQTT configurations.

    wardenmqtt check config.json
    wardenmqtt evaluate config.json --user alice --password secret \
        --subscribe home/# --publish home/kitchen
"""

import argparse

from .config import load_config, build_engine
from .errors import ConfigError
from .logging import get_logger

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_DENIED = 2


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='wardenmqtt',
                                     description='Check and exercise WardenMQTT access policies')
    parser.add_argument('--log-level', choices=('DEBUG', 'INFO', 'WARNING', 'ERROR'),
                        help='Override the configured log level')
    sub = parser.add_subparsers(dest='command', required=True)

    check = sub.add_parser('check', help='Validate a configuration file')
    check.add_argument('config', help='Path to the JSON configuration')

    evaluate = sub.add_parser('evaluate', help='Authenticate and evaluate topics')
    evaluate.add_argument('config', help='Path to the JSON configuration')
    evaluate.add_argument('--user', required=True, help='Username to authenticate')
    evaluate.add_argument('--password', required=True, help='Password to present')
    evaluate.add_argument('--client-id', default='wardenmqtt-cli', help='Client id to bind')
    evaluate.add_argument('--subscribe', action='append', default=[], metavar='TOPIC',
                          help='Topic filter to check for subscribe (repeatable)')
    evaluate.add_argument('--publish', action='append', default=[], metavar='TOPIC',
                          help='Topic to check for publish (repeatable)')
    return parser.parse_args(argv)


def _describe(policy):
    actions = []
    if policy.allow_subscribe:
        actions.append('sub')
    if policy.allow_publish:
        actions.append('pub')
    return '[%s] %s (%s)' % ('/'.join(actions) or '-', policy.topic,
                             'regex' if policy.use_regex else 'exact')


def run_check(config):
    # Force eager compilation so broken regexes show up now
    config.compile_patterns = True
    engine = build_engine(config)
    for user in engine.directory:
        print('%s: %d policies' % (user.username, len(user.policies)))
        for policy in user.policies:
            marker = '' if policy.pattern.is_valid() else '  INVALID'
            print('    %s%s' % (_describe(policy), marker))
    invalid = engine.stats.invalid_patterns
    if invalid:
        print('Config has %d invalid pattern(s)' % invalid)
        return EXIT_CONFIG
    print('Config OK: %d users, port %d' % (len(engine.directory), config.port))
    return EXIT_OK


def run_evaluate(config, args):
    engine = build_engine(config)
    result = engine.authenticate(args.client_id, args.user, args.password)
    if not result:
        print('DENY connect %s (%s)' % (args.user, result.reason))
        return EXIT_DENIED
    print('ALLOW connect %s' % args.user)

    denied = False
    for topic in args.subscribe:
        allowed = engine.authorize_subscribe(args.client_id, topic)
        denied = denied or not allowed
        print('%s subscribe %s' % ('ALLOW' if allowed else 'DENY', topic))
    for topic in args.publish:
        allowed = engine.authorize_publish(args.client_id, topic)
        denied = denied or not allowed
        print('%s publish %s' % ('ALLOW' if allowed else 'DENY', topic))
    return EXIT_DENIED if denied else EXIT_OK


def main(argv=None):
    args = parse_args(argv)
    try:
        config = load_config(args.config)
        if args.log_level:
            config.log_level = args.log_level
        if args.command == 'check':
            return run_check(config)
        return run_evaluate(config, args)
    except ConfigError as e:
        get_logger('WardenMQTT').error("%s", e.message)
        return EXIT_CONFIG
