"""
Authorization engine for WardenMQTT.

Decides the three broker events:
- connect: check username/password against the user directory and bind the
  client id to the user on success
- subscribe / publish: look up the user bound to the client id and grant the
  request if any of its policies with the matching allow-flag covers the topic

Every call returns a decision. Unknown users, wrong passwords, unbound
client ids, unmatched topics and broken regexes all end up as "deny",
never as an exception.
"""

from .audit import AuditLog
from .logging import get_logger
from .policy import SUBSCRIBE, PUBLISH
from .session import SessionRegistry
from .stats import AuthStats

# Outward-facing reason codes
SUCCESS = 'success'
BAD_USERNAME_OR_PASSWORD = 'bad-username-or-password'

# Internal causes, reported to operators only
UNKNOWN_IDENTITY = 'unknown-identity'
BAD_CREDENTIAL = 'bad-credential'
UNBOUND_SESSION = 'unbound-session'
NO_MATCHING_POLICY = 'no-matching-policy'


class AuthResult:
    """Outcome of a connect attempt.

    reason is safe to hand back to the client and never tells an unknown
    user apart from a wrong password. detail carries that distinction for logs.
    """
    __slots__ = ('success', 'user', 'reason', 'detail')

    def __init__(self, success, user=None, reason=SUCCESS, detail=None):
        self.success = success
        self.user = user
        self.reason = reason
        self.detail = detail

    def __bool__(self):
        return self.success

    def __repr__(self):
        return 'AuthResult(success=%r, user=%r, reason=%r, detail=%r)' % (
            self.success, self.user, self.reason, self.detail)


class AuthorizationEngine:
    """
    Connect/subscribe/publish decisions over a user directory.

    Example:
        engine = AuthorizationEngine(UserDirectory([alice]))
        if engine.authenticate('client-1', 'alice', 'secret'):
            engine.authorize_subscribe('client-1', 'home/kitchen')
    """

    def __init__(self, directory, registry=None, audit=None, stats=None,
                 evict_on_disconnect=False, logger=None):
        """
        Args:
            directory: UserDirectory with all configured users.
            registry: SessionRegistry to bind client ids in (default: new one).
            audit: AuditLog receiving every decision (default: new one).
            stats: AuthStats counters (default: new one).
            evict_on_disconnect: Drop the client id binding in disconnect().
                Off by default: bindings are kept until overwritten.
            logger: Logger for policy-level debug output.
        """
        self.directory = directory
        self.registry = registry if registry is not None else SessionRegistry()
        self._log = logger or get_logger('WardenMQTT')
        self.audit = audit if audit is not None else AuditLog(self._log)
        self.stats = stats if stats is not None else AuthStats()
        self.evict_on_disconnect = evict_on_disconnect

    def authenticate(self, client_id, username, password, endpoint=None, clean_session=None):
        """
        Validate credentials and bind client_id to the user on success.

        endpoint and clean_session are connection details reported by the
        broker. They do not affect the decision and are only audited.

        Returns:
            AuthResult: truthy on success. On failure reason is always
            BAD_USERNAME_OR_PASSWORD and nothing is written to the registry.
        """
        user = self.directory.get(username)
        if user is None:
            detail = UNKNOWN_IDENTITY
        elif not user.check_password(password):
            detail = BAD_CREDENTIAL
        else:
            detail = None

        if detail is not None:
            self.stats.record_decision('connect', False)
            self.audit.connect(client_id, username, password, False, detail,
                               endpoint, clean_session)
            return AuthResult(False, None, BAD_USERNAME_OR_PASSWORD, detail)

        previous = self.registry.bind(client_id, user)
        if previous is not None and previous is not user:
            self._log.info("Client id %s rebound from user %s to %s",
                           client_id, previous.username, user.username)
        self.stats.record_decision('connect', True)
        self.audit.connect(client_id, username, password, True, SUCCESS,
                           endpoint, clean_session)
        return AuthResult(True, user, SUCCESS)

    def authorize_subscribe(self, client_id, topic_filter):
        """Return True if the user bound to client_id may subscribe to topic_filter."""
        allowed, reason = self._authorize(SUBSCRIBE, client_id, topic_filter)
        self.stats.record_decision('subscribe', allowed)
        self.audit.subscribe(client_id, topic_filter, allowed, reason)
        return allowed

    def authorize_publish(self, client_id, topic, payload=None, qos=None, retain=None):
        """Return True if the user bound to client_id may publish to topic.

        payload, qos and retain are only passed through to the audit log.
        """
        allowed, reason = self._authorize(PUBLISH, client_id, topic)
        self.stats.record_decision('publish', allowed)
        self.audit.publish(client_id, topic, payload, allowed, reason, qos, retain)
        return allowed

    def disconnect(self, client_id):
        """
        Handle a client disconnect.

        Returns:
            bool: True if a binding was released (only with evict_on_disconnect).
        """
        released = False
        if self.evict_on_disconnect:
            released = self.registry.release(client_id)
        self.audit.disconnect(client_id, released)
        return released

    def session_user(self, client_id):
        """Return the User bound to client_id, or None."""
        return self.registry.lookup(client_id)

    def stats_snapshot(self):
        return self.stats.snapshot(bound_sessions=len(self.registry))

    def _authorize(self, action, client_id, topic):
        user = self.registry.lookup(client_id)
        if user is None:
            self.stats.record('unbound_denials')
            return False, UNBOUND_SESSION

        # Evaluate every eligible policy, the result is their logical OR
        allowed = False
        for policy in user.policies:
            if not policy.allows(action):
                continue
            was_invalid = policy.pattern.invalid
            matched = policy.check_topic(topic)
            if policy.pattern.invalid and not was_invalid:
                self.stats.record('invalid_patterns')
            if matched:
                allowed = True
                self._log.debug("Policy %r grants %s on %s to %s",
                                policy.topic, action, topic, client_id)
        if allowed:
            return True, SUCCESS
        return False, NO_MATCHING_POLICY
