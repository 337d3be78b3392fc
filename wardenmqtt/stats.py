"""Authorization statistics and $SYS topics for WardenMQTT."""

import threading
import time

# Time functions with CPython fallback
try:
    _ticks_ms = time.ticks_ms
    _ticks_diff = time.ticks_diff
except AttributeError:
    def _ticks_ms():
        return int(time.time() * 1000)

    def _ticks_diff(new, old):
        return new - old


class AuthStats:
    """Counts decisions made by the authorization engine."""
    __slots__ = (
        'connects_accepted', 'connects_rejected',
        'subscribes_accepted', 'subscribes_rejected',
        'publishes_accepted', 'publishes_rejected',
        'unbound_denials', 'invalid_patterns',
        'start_time', '_lock'
    )

    COUNTERS = (
        'connects_accepted', 'connects_rejected',
        'subscribes_accepted', 'subscribes_rejected',
        'publishes_accepted', 'publishes_rejected',
        'unbound_denials', 'invalid_patterns',
    )

    def __init__(self):
        for name in AuthStats.COUNTERS:
            setattr(self, name, 0)
        self.start_time = _ticks_ms()
        self._lock = threading.Lock()

    def record(self, counter, amount=1):
        """Increment a counter by name."""
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    def record_decision(self, kind, allowed):
        """Record a connect/subscribe/publish outcome."""
        plural = 'publishes' if kind == 'publish' else kind + 's'
        self.record('%s_%s' % (plural, 'accepted' if allowed else 'rejected'))

    def get_uptime(self):
        return _ticks_diff(_ticks_ms(), self.start_time) // 1000

    def snapshot(self, bound_sessions=None):
        """Generate $SYS topic dict.

        Args:
            bound_sessions: Number of client ids currently bound to a user
        """
        prefix = '$SYS/broker/auth/'
        topics = {}
        topics[prefix + 'uptime'] = str(self.get_uptime())
        with self._lock:
            for name in AuthStats.COUNTERS:
                topics[prefix + name.replace('_', '/')] = str(getattr(self, name))
        if bound_sessions is not None:
            topics[prefix + 'sessions/bound'] = str(bound_sessions)
        return topics
