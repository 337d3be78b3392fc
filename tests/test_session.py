"""Tests for wardenmqtt.session module."""

from concurrent.futures import ThreadPoolExecutor

from wardenmqtt.policy import User
from wardenmqtt.session import SessionRegistry


class TestSessionRegistry:
    """Test client id bindings."""

    def test_lookup_unbound(self):
        """Test lookup of an unknown client id returns None."""
        assert SessionRegistry().lookup('c1') is None

    def test_bind_and_lookup(self, alice):
        """Test a bound user is returned by reference."""
        registry = SessionRegistry()

        assert registry.bind('c1', alice) is None
        assert registry.lookup('c1') is alice

    def test_rebind_last_writer_wins(self, alice, sensor):
        """Test rebinding replaces the user and returns the previous one."""
        registry = SessionRegistry()
        registry.bind('c1', alice)

        previous = registry.bind('c1', sensor)

        assert previous is alice
        assert registry.lookup('c1') is sensor
        assert len(registry) == 1

    def test_release(self, alice):
        """Test release removes the binding once."""
        registry = SessionRegistry()
        registry.bind('c1', alice)

        assert registry.release('c1') is True
        assert registry.release('c1') is False
        assert 'c1' not in registry

    def test_clients_snapshot(self, alice, sensor):
        """Test clients() returns a copy of bound ids."""
        registry = SessionRegistry()
        registry.bind('c1', alice)
        registry.bind('c2', sensor)

        clients = registry.clients()
        registry.release('c1')

        assert sorted(clients) == ['c1', 'c2']
        assert registry.clients() == ['c2']

    def test_clear(self, alice):
        """Test clear drops every binding."""
        registry = SessionRegistry()
        registry.bind('c1', alice)

        registry.clear()

        assert len(registry) == 0


class TestSessionRegistryConcurrency:
    """Test concurrent binds and lookups."""

    def test_concurrent_distinct_binds(self):
        """Test N concurrent binds for N client ids are all kept."""
        registry = SessionRegistry()
        users = [User('user%d' % i, 'pw') for i in range(200)]

        with ThreadPoolExecutor(max_workers=16) as pool:
            list(pool.map(lambda i: registry.bind('c%d' % i, users[i]), range(200)))

        assert len(registry) == 200
        for i, user in enumerate(users):
            assert registry.lookup('c%d' % i) is user

    def test_concurrent_rebind_same_id(self):
        """Test racing binds on one id leave one of the written users."""
        registry = SessionRegistry()
        users = [User('user%d' % i, 'pw') for i in range(50)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda user: registry.bind('shared', user), users))

        assert registry.lookup('shared') in users
        assert len(registry) == 1
