"""
WardenMQTT - Authorization layer for MQTT brokers

Username/password authentication and per-topic publish/subscribe policies,
plugged into a broker through its auth provider hooks.
"""

__version__ = '1.0.0'

from .config import WardenConfig, load_config, build_engine, build_provider
from .errors import WardenError, ConfigError, PatternError
from .topic import TopicPattern, matches
from .policy import Policy, User
from .directory import UserDirectory
from .session import SessionRegistry
from .audit import AuditEvent, AuditLog
from .stats import AuthStats
from .engine import AuthorizationEngine, AuthResult
from .provider import (
    AuthProvider, PolicyAuthProvider, ConnectContext, SubscribeContext, PublishContext
)
