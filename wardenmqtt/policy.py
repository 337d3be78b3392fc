"""
Users and access policies for WardenMQTT.

Both are built once from configuration and never change afterwards.
A policy only ever grants access: there are no deny rules, and anything no
policy grants is refused.
"""

from .errors import ConfigError
from .topic import TopicPattern

SUBSCRIBE = 'subscribe'
PUBLISH = 'publish'


def _lookup(record, names, default=None):
    """Case-insensitive key lookup trying each alias in names."""
    folded = {}
    for key, value in record.items():
        if isinstance(key, str):
            folded.setdefault(key.lower(), value)
    for name in names:
        if name.lower() in folded:
            return folded[name.lower()]
    return default


def _flag(record, names, where):
    value = _lookup(record, names, False)
    if not isinstance(value, bool):
        raise ConfigError('%s: %s must be true or false, got %r' % (where, names[0], value))
    return value


class _Frozen:
    """Mixin rejecting attribute assignment after __init__."""
    __slots__ = ()

    def __setattr__(self, name, value):
        raise AttributeError('%s is immutable' % type(self).__name__)

    def __delattr__(self, name):
        raise AttributeError('%s is immutable' % type(self).__name__)


class Policy(_Frozen):
    """A single allow rule: topic pattern plus subscribe/publish flags."""
    __slots__ = ('topic', 'use_regex', 'allow_subscribe', 'allow_publish', 'pattern')

    def __init__(self, topic, use_regex=False, allow_subscribe=False, allow_publish=False):
        if not isinstance(topic, str) or not topic:
            raise ValueError('policy topic must be a non-empty string')
        set_attr = object.__setattr__
        set_attr(self, 'topic', topic)
        set_attr(self, 'use_regex', bool(use_regex))
        set_attr(self, 'allow_subscribe', bool(allow_subscribe))
        set_attr(self, 'allow_publish', bool(allow_publish))
        # Compiled regex is cached on the pattern, not part of the policy value
        set_attr(self, 'pattern', TopicPattern(topic, use_regex))

    @classmethod
    def from_dict(cls, record, where='policy'):
        """Build a Policy from a configuration record.

        Accepted keys (any case): topic, useRegex, allowSubscription
        (or allowSubscribe), allowPublish. Unknown keys are ignored.

        Raises:
            ConfigError: If the record is malformed.
        """
        if not isinstance(record, dict):
            raise ConfigError('%s must be an object, got %s' % (where, type(record).__name__))
        topic = _lookup(record, ('topic',))
        if not isinstance(topic, str) or not topic:
            raise ConfigError('%s: topic must be a non-empty string' % where)
        return cls(
            topic,
            use_regex=_flag(record, ('useRegex', 'use_regex'), where),
            allow_subscribe=_flag(record, ('allowSubscription', 'allowSubscribe',
                                           'allow_subscribe'), where),
            allow_publish=_flag(record, ('allowPublish', 'allow_publish'), where),
        )

    def allows(self, action):
        """Return the allow-flag for 'subscribe' or 'publish'."""
        if action == SUBSCRIBE:
            return self.allow_subscribe
        if action == PUBLISH:
            return self.allow_publish
        return False

    def check_topic(self, topic):
        """Return True if topic is covered by this policy's pattern."""
        return self.pattern.matches(topic)

    def __eq__(self, other):
        if not isinstance(other, Policy):
            return NotImplemented
        return (self.topic, self.use_regex, self.allow_subscribe, self.allow_publish) == \
            (other.topic, other.use_regex, other.allow_subscribe, other.allow_publish)

    def __hash__(self):
        return hash((self.topic, self.use_regex, self.allow_subscribe, self.allow_publish))

    def __repr__(self):
        return 'Policy(%r, use_regex=%r, allow_subscribe=%r, allow_publish=%r)' % (
            self.topic, self.use_regex, self.allow_subscribe, self.allow_publish)


class User(_Frozen):
    """An authentication identity owning an ordered tuple of policies."""
    __slots__ = ('username', 'password', 'policies')

    def __init__(self, username, password, policies=()):
        if not isinstance(username, str) or not username:
            raise ValueError('username must be a non-empty string')
        set_attr = object.__setattr__
        set_attr(self, 'username', username)
        set_attr(self, 'password', password)
        set_attr(self, 'policies', tuple(policies))

    @classmethod
    def from_dict(cls, record, where='user'):
        """Build a User (and its policies) from a configuration record.

        Accepted keys (any case): username (or userName), password, policies.

        Raises:
            ConfigError: If the record is malformed.
        """
        if not isinstance(record, dict):
            raise ConfigError('%s must be an object, got %s' % (where, type(record).__name__))
        username = _lookup(record, ('username', 'user'))
        if not isinstance(username, str) or not username:
            raise ConfigError('%s: username must be a non-empty string' % where)
        where = 'user %r' % username
        password = _lookup(record, ('password',))
        if not isinstance(password, str):
            raise ConfigError('%s: password must be a string' % where)
        records = _lookup(record, ('policies',), [])
        if not isinstance(records, list):
            raise ConfigError('%s: policies must be a list' % where)
        policies = [Policy.from_dict(item, '%s policy #%d' % (where, i))
                    for i, item in enumerate(records)]
        return cls(username, password, policies)

    def check_password(self, password):
        """Exact, case-sensitive comparison. None never matches."""
        if password is None or self.password is None:
            return False
        if isinstance(password, (bytes, bytearray)):
            try:
                password = bytes(password).decode('utf-8')
            except UnicodeError:
                return False
        return password == self.password

    def __repr__(self):
        return 'User(%r, policies=%d)' % (self.username, len(self.policies))
