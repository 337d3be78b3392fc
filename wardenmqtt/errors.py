"""
WardenMQTT Exception Hierarchy

Configuration failures (fatal at startup) and pattern compilation failures
(caught by the topic matcher and turned into "never matches").
Decision paths never raise these to the broker.
"""


class WardenError(Exception):
    """Base exception for all WardenMQTT errors."""
    __slots__ = ('message',)

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class ConfigError(WardenError):
    """Configuration is missing or malformed."""
    __slots__ = ('path',)

    def __init__(self, message, path=None):
        if path is not None:
            message = '%s: %s' % (path, message)
        super().__init__(message)
        self.path = path


class PatternError(WardenError):
    """A regex topic pattern failed to compile."""
    __slots__ = ('pattern',)

    def __init__(self, message, pattern=None):
        super().__init__(message)
        self.pattern = pattern
