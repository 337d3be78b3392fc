"""
Topic matching for WardenMQTT policies.

Two modes are supported:
- exact: the policy topic must equal the requested topic, byte for byte.
  MQTT wildcards ('+', '#') are NOT expanded, they are plain characters.
- regex: the policy topic is a regular expression searched anywhere in the
  requested topic (unanchored, so 'foo' matches 'bar/foo/baz').

A regex that fails to compile never matches anything. The failure is logged
once and never raised to the caller.
"""

import re

from .errors import PatternError
from .logging import get_logger


def _to_str(value):
    """Decode broker-supplied bytes; returns None for undecodable input."""
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode('utf-8')
        except UnicodeError:
            return None
    if isinstance(value, str):
        return value
    return None


class TopicPattern:
    """Topic pattern bound to one policy, with a lazily compiled regex.

    Compilation happens on first use and the result is kept for the
    lifetime of the pattern. Two threads racing on the first match may both
    compile; they produce the same regex, so the race is harmless.
    """
    __slots__ = ('source', 'use_regex', '_compiled', '_invalid')

    def __init__(self, source, use_regex=False):
        self.source = source
        self.use_regex = bool(use_regex)
        self._compiled = None
        self._invalid = False

    @property
    def compiled(self):
        """The cached regex, or None if not compiled (yet)."""
        return self._compiled

    @property
    def invalid(self):
        """True once compilation has been attempted and failed."""
        return self._invalid

    def compile(self):
        """Compile the regex now.

        Returns:
            The compiled regex, or None for exact-mode patterns.

        Raises:
            PatternError: If the source is not a valid regular expression.
        """
        if not self.use_regex:
            return None
        compiled = self._compiled
        if compiled is None:
            try:
                compiled = re.compile(self.source)
            except (re.error, TypeError, ValueError, OverflowError, RecursionError) as e:
                self._invalid = True
                raise PatternError('invalid topic pattern %r: %s' % (self.source, e),
                                   self.source)
            self._compiled = compiled
        return compiled

    def is_valid(self):
        """Check compilability without raising."""
        try:
            self.compile()
        except PatternError:
            return False
        return True

    def matches(self, topic):
        """Return True if topic is covered by this pattern."""
        topic = _to_str(topic)
        if topic is None:
            return False
        if not self.use_regex:
            return self.source == topic
        if self._invalid:
            return False
        try:
            compiled = self.compile()
        except PatternError as e:
            get_logger('WardenMQTT').warning("%s (policy will never match)", e.message)
            return False
        return compiled.search(topic) is not None

    def __repr__(self):
        return 'TopicPattern(%r, use_regex=%r)' % (self.source, self.use_regex)


def matches(pattern, use_regex, topic):
    """One-shot match of topic against pattern.

    Args:
        pattern: str or bytes, literal topic or regex source
        use_regex: bool, selects regex (unanchored search) or exact mode
        topic: str or bytes, candidate topic name or filter

    Returns:
        bool: True on match. Invalid regexes and undecodable input never match.
    """
    pattern = _to_str(pattern)
    if not pattern:
        return False
    return TopicPattern(pattern, use_regex).matches(topic)
