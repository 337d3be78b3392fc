"""
Print-based logging used by every WardenMQTT component.

Lines look like '[WARN] WardenMQTT: Subscription failed for ...' so decision
audit lines, rejected connects and broken policy patterns can be grepped from
the broker's console output. Loggers are cached per name: the engine, the
audit log and the topic matcher normally share the 'WardenMQTT' logger, and
build_engine() applies the configured level to it.
"""

DEBUG = 0
INFO = 1
WARNING = 2
ERROR = 3

_LEVEL_NAMES = {0: 'DEBUG', 1: 'INFO', 2: 'WARN', 3: 'ERROR'}
_NAME_LEVELS = {'DEBUG': 0, 'INFO': 1, 'WARNING': 2, 'ERROR': 3}


def _resolve_level(level):
    # Names from config files may be any case; unknown names mean INFO
    if isinstance(level, str):
        return _NAME_LEVELS.get(level.upper(), INFO)
    return level


class Logger:
    """Named, level-filtered logger for policy decisions and startup checks."""
    __slots__ = ('name', 'level')

    def __init__(self, name, level=INFO):
        self.name = name
        self.level = _resolve_level(level)

    def set_level(self, level):
        """Change the threshold, e.g. when a config or --log-level is applied."""
        self.level = _resolve_level(level)

    def is_enabled_for(self, level):
        """True if a message at level would be printed."""
        return level >= self.level

    def _log(self, level, msg, *args):
        if level >= self.level:
            if args:
                msg = msg % args
            print("[%s] %s: %s" % (_LEVEL_NAMES.get(level, '?'), self.name, msg))

    def debug(self, msg, *args):
        self._log(DEBUG, msg, *args)

    def info(self, msg, *args):
        self._log(INFO, msg, *args)

    def warning(self, msg, *args):
        self._log(WARNING, msg, *args)

    def error(self, msg, *args):
        self._log(ERROR, msg, *args)


_loggers = {}


def get_logger(name, level=INFO):
    """Return the cached logger for name, creating it on first use.

    The level only applies on creation; use Logger.set_level() afterwards.
    Engines built with the same name therefore share one threshold.
    """
    if name not in _loggers:
        _loggers[name] = Logger(name, level)
    return _loggers[name]
