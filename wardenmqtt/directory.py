"""User directory: every configured user, looked up by username."""

from .errors import ConfigError, PatternError


class UserDirectory:
    """Read-only username -> User mapping, built once at startup.

    Nothing mutates the directory after construction, so concurrent
    lookups need no locking.
    """
    __slots__ = ('_users',)

    def __init__(self, users=()):
        table = {}
        for user in users:
            if user.username in table:
                raise ConfigError('duplicate username %r' % user.username)
            table[user.username] = user
        self._users = table

    def get(self, username):
        """Return the User for username, or None."""
        if isinstance(username, (bytes, bytearray)):
            try:
                username = bytes(username).decode('utf-8')
            except UnicodeError:
                return None
        if not isinstance(username, str):
            return None
        return self._users.get(username)

    def usernames(self):
        return list(self._users)

    def compile_all(self, log=None):
        """Compile every regex policy now instead of on first use.

        Args:
            log: Optional Logger; invalid patterns are reported at WARN.

        Returns:
            int: Number of regex policies that failed to compile.
        """
        invalid = 0
        for user in self._users.values():
            for policy in user.policies:
                try:
                    policy.pattern.compile()
                except PatternError as e:
                    invalid += 1
                    if log is not None:
                        log.warning("User %s: %s", user.username, e.message)
        return invalid

    def __contains__(self, username):
        return self.get(username) is not None

    def __len__(self):
        return len(self._users)

    def __iter__(self):
        return iter(list(self._users.values()))
