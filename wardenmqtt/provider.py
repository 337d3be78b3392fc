"""
Broker-facing adapters for WardenMQTT.

Two ways to plug the engine into a broker:

1. Auth provider hooks, called directly by the broker:
   authenticate(client_id, username, password) -> bool
   authorize_publish(client_id, topic) -> bool
   authorize_subscribe(client_id, topic_filter) -> max QoS (0-2) or -1 to deny
   cleanup_client(client_id)

2. Context callbacks, where the broker hands over a mutable context and reads
   the decision back (reason_code for connect, accept for subscribe/publish).
"""

# CONNACK return codes (MQTT 3.1.1)
CONNACK_ACCEPTED = 0
CONNACK_REFUSED_CREDENTIALS = 4


class AuthProvider:
    """Hook surface a broker calls into; this base grants every request.

    Useful as a stand-in while no user directory is configured.
    PolicyAuthProvider overrides each hook with an engine decision.
    """

    def authenticate(self, client_id, username, password):
        """Connect hook. True lets the client in."""
        return True

    def authorize_publish(self, client_id, topic):
        """Publish hook. True forwards the message to subscribers."""
        return True

    def authorize_subscribe(self, client_id, topic_filter):
        """Subscribe hook. Granted QoS (0-2), or -1 for a SUBACK failure."""
        return 2

    def cleanup_client(self, client_id):
        """Disconnect hook. Nothing is bound here, so nothing to release."""
        pass


class ConnectContext:
    """Connection validation context. reason_code is filled in by the validator."""
    __slots__ = ('client_id', 'username', 'password', 'endpoint', 'clean_session',
                 'reason_code')

    def __init__(self, client_id, username, password, endpoint=None, clean_session=True):
        self.client_id = client_id
        self.username = username
        self.password = password
        self.endpoint = endpoint
        self.clean_session = clean_session
        self.reason_code = None


class SubscribeContext:
    """Subscription interception context. accept is filled in by the interceptor."""
    __slots__ = ('client_id', 'topic_filter', 'accept')

    def __init__(self, client_id, topic_filter):
        self.client_id = client_id
        self.topic_filter = topic_filter
        self.accept = False


class PublishContext:
    """Publish interception context. accept is filled in by the interceptor."""
    __slots__ = ('client_id', 'topic', 'payload', 'qos', 'retain', 'accept')

    def __init__(self, client_id, topic, payload, qos=0, retain=False):
        self.client_id = client_id
        self.topic = topic
        self.payload = payload
        self.qos = qos
        self.retain = retain
        self.accept = False


class PolicyAuthProvider(AuthProvider):
    """Auth provider backed by an AuthorizationEngine."""

    def __init__(self, engine, max_qos=2):
        """
        Args:
            engine: AuthorizationEngine making the decisions
            max_qos: QoS granted to authorized subscriptions (0-2)
        """
        self.engine = engine
        self.max_qos = max_qos

    def authenticate(self, client_id, username, password):
        """Returns True if the credentials are valid (and binds client_id)."""
        return self.engine.authenticate(client_id, username, password).success

    def authorize_publish(self, client_id, topic):
        """Returns True if a publish policy covers topic."""
        return self.engine.authorize_publish(client_id, topic)

    def authorize_subscribe(self, client_id, topic_filter):
        """Returns max_qos if a subscribe policy covers topic_filter, else -1."""
        if self.engine.authorize_subscribe(client_id, topic_filter):
            return self.max_qos
        return -1

    def cleanup_client(self, client_id):
        """Forward disconnects to the engine."""
        self.engine.disconnect(client_id)

    def validate_connection(self, ctx):
        """Connection validator callback. Sets ctx.reason_code."""
        result = self.engine.authenticate(ctx.client_id, ctx.username, ctx.password,
                                          ctx.endpoint, ctx.clean_session)
        ctx.reason_code = CONNACK_ACCEPTED if result else CONNACK_REFUSED_CREDENTIALS
        return ctx.reason_code

    def intercept_subscription(self, ctx):
        """Subscription interceptor callback. Sets ctx.accept."""
        ctx.accept = self.engine.authorize_subscribe(ctx.client_id, ctx.topic_filter)
        return ctx.accept

    def intercept_publish(self, ctx):
        """Publish interceptor callback. Sets ctx.accept."""
        ctx.accept = self.engine.authorize_publish(ctx.client_id, ctx.topic, ctx.payload,
                                                  ctx.qos, ctx.retain)
        return ctx.accept
