"""
Session registry for WardenMQTT.

Maps the broker's client identifier to the User authenticated on that
connection. This is the only mutable state shared between concurrent
connect, subscribe and publish callbacks.
"""

import threading


class SessionRegistry:
    """
    Thread-safe client_id -> User binding table.

    Each operation holds the lock for a single dict access, so a reader
    never sees a half-written entry. Reconnecting with the same client_id
    overwrites the previous binding (last writer wins).
    """
    __slots__ = ('_bindings', '_lock')

    def __init__(self):
        self._bindings = {}  # client_id -> User
        self._lock = threading.Lock()

    def bind(self, client_id, user):
        """
        Bind client_id to user, replacing any previous binding.

        Args:
            client_id: Broker-supplied client identifier
            user: Authenticated User (stored by reference, never copied)

        Returns:
            The previously bound User, or None.
        """
        with self._lock:
            previous = self._bindings.get(client_id)
            self._bindings[client_id] = user
        return previous

    def lookup(self, client_id):
        """Return the User bound to client_id, or None."""
        with self._lock:
            return self._bindings.get(client_id)

    def release(self, client_id):
        """
        Remove the binding for client_id.

        Returns:
            bool: True if a binding existed and was removed.
        """
        with self._lock:
            return self._bindings.pop(client_id, None) is not None

    def clients(self):
        """Snapshot of currently bound client identifiers."""
        with self._lock:
            return list(self._bindings)

    def clear(self):
        with self._lock:
            self._bindings.clear()

    def __contains__(self, client_id):
        with self._lock:
            return client_id in self._bindings

    def __len__(self):
        with self._lock:
            return len(self._bindings)
