"""
pytest configuration and fixtures for WardenMQTT tests.
"""

import json

import pytest

from wardenmqtt.audit import AuditLog
from wardenmqtt.directory import UserDirectory
from wardenmqtt.engine import AuthorizationEngine
from wardenmqtt.logging import get_logger, INFO
from wardenmqtt.policy import Policy, User
from wardenmqtt.session import SessionRegistry


class EventRecorder:
    """Audit listener collecting every event it receives."""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)

    def kinds(self):
        return [event.kind for event in self.events]

    def last(self):
        return self.events[-1]


@pytest.fixture(autouse=True)
def reset_log_level():
    """Keep the shared package logger at INFO between tests."""
    get_logger('WardenMQTT').set_level(INFO)
    yield
    get_logger('WardenMQTT').set_level(INFO)


@pytest.fixture
def alice():
    """User from the home automation scenario: literal 'home/#', subscribe only."""
    return User('alice', 'secret', [
        Policy('home/#', use_regex=False, allow_subscribe=True, allow_publish=False),
    ])


@pytest.fixture
def sensor():
    """User publishing under sensors/ via regex, reading commands exactly."""
    return User('sensor', 's3nsor', [
        Policy('^sensors/.*', use_regex=True, allow_subscribe=False, allow_publish=True),
        Policy('commands/sensor', allow_subscribe=True),
    ])


@pytest.fixture
def nobody():
    """Authenticated user without any policy."""
    return User('nobody', 'nothing')


@pytest.fixture
def directory(alice, sensor, nobody):
    return UserDirectory([alice, sensor, nobody])


@pytest.fixture
def registry():
    return SessionRegistry()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def engine(directory, registry, recorder):
    """Engine with an injected registry and an event recorder attached."""
    audit = AuditLog()
    audit.add_listener(recorder)
    return AuthorizationEngine(directory, registry=registry, audit=audit)


@pytest.fixture
def config_data():
    """Configuration in the JSON shape operators write."""
    return {
        'port': 1883,
        'users': [
            {
                'username': 'alice',
                'password': 'secret',
                'policies': [
                    {'topic': 'home/#', 'useRegex': False,
                     'allowSubscription': True, 'allowPublish': False},
                ],
            },
            {
                'UserName': 'sensor',
                'Password': 's3nsor',
                'Policies': [
                    {'Topic': '^sensors/', 'UseRegex': True,
                     'AllowSubscription': False, 'AllowPublish': True, 'AnyTopic': False},
                ],
            },
        ],
    }


@pytest.fixture
def config_file(tmp_path, config_data):
    """Write config_data to a temporary JSON file and return its path."""
    path = tmp_path / 'config.json'
    path.write_text(json.dumps(config_data), encoding='utf-8')
    return str(path)
