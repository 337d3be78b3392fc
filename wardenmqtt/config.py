"""
WardenMQTT Configuration

Configuration object with defaults, JSON loading and builders that turn a
validated configuration into a ready-to-use engine or auth provider.
A bad configuration raises ConfigError; the process should not start.
"""

import json

from .audit import AuditLog
from .directory import UserDirectory
from .engine import AuthorizationEngine
from .errors import ConfigError
from .logging import get_logger
from .policy import User, _lookup
from .provider import PolicyAuthProvider
from .stats import AuthStats

_VALID_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')

# option name -> accepted key spellings in JSON
_OPTION_KEYS = {
    'bind_addr': ('bind_addr', 'bindAddr'),
    'port': ('port',),
    'users': ('users',),
    'log_level': ('log_level', 'logLevel'),
    'log_credentials': ('log_credentials', 'logCredentials'),
    'log_payload': ('log_payload', 'logPayload'),
    'compile_patterns': ('compile_patterns', 'compilePatterns'),
    'evict_on_disconnect': ('evict_on_disconnect', 'evictOnDisconnect'),
    'max_qos': ('max_qos', 'maxQos'),
}


class WardenConfig:
    """Configuration parameters for WardenMQTT."""

    __slots__ = (
        'bind_addr', 'port',
        'users',
        'log_level', 'log_credentials', 'log_payload',
        'compile_patterns', 'evict_on_disconnect',
        'max_qos',
    )

    def __init__(self, **kwargs):
        """Initialize configuration with defaults, override with kwargs."""
        # Network settings (passed through to the broker)
        self.bind_addr = '0.0.0.0'
        self.port = 1883

        # User records as loaded from JSON, or User instances
        self.users = []

        # Logging
        self.log_level = 'INFO'
        self.log_credentials = False
        self.log_payload = True

        # Policy evaluation
        self.compile_patterns = False
        self.evict_on_disconnect = False
        self.max_qos = 2

        # Override defaults with provided kwargs
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    @classmethod
    def from_dict(cls, data):
        """Build a configuration from a parsed JSON object.

        Keys are matched case-insensitively, in snake_case or camelCase.

        Raises:
            ConfigError: If data is not an object.
        """
        if not isinstance(data, dict):
            raise ConfigError('configuration must be a JSON object, got %s' % type(data).__name__)
        kwargs = {}
        missing = object()
        for option, keys in _OPTION_KEYS.items():
            value = _lookup(data, keys, missing)
            if value is not missing:
                kwargs[option] = value
        return cls(**kwargs)

    def validate(self):
        """Validate configuration parameters.

        Raises:
            ConfigError: If any parameter is invalid.
        """
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigError('port must be an integer, got %r' % (self.port,))

        if not (1 <= self.port <= 65535):
            raise ConfigError('port must be in range 1-65535, got %d' % self.port)

        if not isinstance(self.users, list):
            raise ConfigError('users must be a list, got %s' % type(self.users).__name__)

        if isinstance(self.log_level, str):
            self.log_level = self.log_level.upper()
        if self.log_level not in _VALID_LEVELS:
            raise ConfigError('log_level must be one of %s, got %s' % (_VALID_LEVELS, self.log_level))

        for name in ('log_credentials', 'log_payload', 'compile_patterns', 'evict_on_disconnect'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError('%s must be true or false, got %r' % (name, getattr(self, name)))

        if isinstance(self.max_qos, bool) or self.max_qos not in (0, 1, 2):
            raise ConfigError('max_qos must be 0, 1 or 2, got %r' % (self.max_qos,))

    def build_users(self):
        """Return User objects for the configured user records.

        Raises:
            ConfigError: If a record is malformed.
        """
        users = []
        for i, record in enumerate(self.users):
            if isinstance(record, User):
                users.append(record)
            else:
                users.append(User.from_dict(record, 'user #%d' % i))
        return users


def load_config(path):
    """Read and validate a JSON configuration file.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    try:
        with open(path, 'r', encoding='utf-8') as fh:
            data = json.load(fh)
    except FileNotFoundError:
        raise ConfigError('configuration file not found', path)
    except OSError as e:
        raise ConfigError('cannot read configuration: %s' % e, path)
    except ValueError as e:
        raise ConfigError('invalid JSON: %s' % e, path)

    try:
        config = WardenConfig.from_dict(data)
        config.validate()
        config.users = config.build_users()
        UserDirectory(config.users)
    except ConfigError as e:
        raise ConfigError(e.message, path)
    return config


def build_engine(config, registry=None, logger_name='WardenMQTT'):
    """Create an AuthorizationEngine from a configuration.

    Loggers are cached per name, so engines built with the same logger_name
    share one logger and the last configured level wins. Give each engine its
    own name to keep levels apart. Regex compile warnings raised while
    matching always go to the 'WardenMQTT' logger.

    Args:
        config: WardenConfig (validated here)
        registry: Optional SessionRegistry to share with other components
        logger_name: Name of the logger for audit lines and debug output

    Raises:
        ConfigError: If the configuration is invalid.
    """
    config.validate()
    log = get_logger(logger_name, config.log_level)
    log.set_level(config.log_level)

    directory = UserDirectory(config.build_users())
    stats = AuthStats()
    if config.compile_patterns:
        invalid = directory.compile_all(log)
        if invalid:
            stats.record('invalid_patterns', invalid)

    audit = AuditLog(log, log_credentials=config.log_credentials,
                     log_payload=config.log_payload)
    log.info("Loaded %d users for port %d", len(directory), config.port)
    return AuthorizationEngine(directory, registry=registry, audit=audit, stats=stats,
                               evict_on_disconnect=config.evict_on_disconnect, logger=log)


def build_provider(config, registry=None, logger_name='WardenMQTT'):
    """Create a PolicyAuthProvider ready to hand to a broker."""
    engine = build_engine(config, registry, logger_name)
    return PolicyAuthProvider(engine, max_qos=config.max_qos)
