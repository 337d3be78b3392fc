"""
Decision auditing for WardenMQTT.

Every connect, subscribe and publish decision becomes an AuditEvent, is
written to the log as one line and handed to registered listeners.
Passwords are only recorded when log_credentials is enabled.
"""

from .logging import get_logger

CONNECT = 'connect'
SUBSCRIBE = 'subscribe'
PUBLISH = 'publish'
DISCONNECT = 'disconnect'


class AuditEvent:
    """Structured record of a single authorization decision."""
    __slots__ = ('kind', 'client_id', 'allowed', 'reason',
                 'username', 'password', 'endpoint', 'clean_session',
                 'topic', 'payload', 'qos', 'retain')

    def __init__(self, kind, client_id, allowed, reason=None,
                 username=None, password=None, endpoint=None, clean_session=None,
                 topic=None, payload=None, qos=None, retain=None):
        self.kind = kind
        self.client_id = client_id
        self.allowed = allowed
        self.reason = reason
        self.username = username
        self.password = password
        self.endpoint = endpoint
        self.clean_session = clean_session
        self.topic = topic
        self.payload = payload
        self.qos = qos
        self.retain = retain

    def as_dict(self):
        """Return the populated fields as a dict."""
        result = {}
        for name in AuditEvent.__slots__:
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        return result

    def __repr__(self):
        return 'AuditEvent(%s, client_id=%r, allowed=%r, reason=%r)' % (
            self.kind, self.client_id, self.allowed, self.reason)


def _text(value):
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8', 'replace')
    return value


class AuditLog:
    """Turns decisions into AuditEvents, log lines and listener calls.

    Args:
        logger: Logger to write to (default: the 'WardenMQTT' logger)
        log_credentials: Include presented passwords in events and log lines
        log_payload: Include publish payloads in events and log lines
    """
    __slots__ = ('_log', 'log_credentials', 'log_payload', '_listeners')

    def __init__(self, logger=None, log_credentials=False, log_payload=True):
        self._log = logger or get_logger('WardenMQTT')
        self.log_credentials = log_credentials
        self.log_payload = log_payload
        self._listeners = []

    def add_listener(self, listener):
        """Register listener(event), called for every decision."""
        self._listeners.append(listener)
        return listener

    def remove_listener(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def connect(self, client_id, username, password, allowed, reason,
                endpoint=None, clean_session=None):
        username = _text(username)
        event = AuditEvent(CONNECT, client_id, allowed, reason, username=username,
                           password=_text(password) if self.log_credentials else None,
                           endpoint=endpoint, clean_session=clean_session)
        if self.log_credentials:
            who = 'Username = %s, Password = %s' % (username, event.password)
        else:
            who = 'Username = %s' % username
        # Broker-side connection details, when the broker supplies them
        if endpoint is not None:
            who += ', Endpoint = %s' % (endpoint,)
        if clean_session is not None:
            who += ', CleanSession = %s' % (clean_session,)
        if allowed:
            self._log.info("New connection: ClientId = %s, %s", client_id, who)
        else:
            self._log.warning("Connection rejected: ClientId = %s, %s, Reason = %s",
                              client_id, who, reason)
        return self._emit(event)

    def subscribe(self, client_id, topic_filter, allowed, reason):
        topic_filter = _text(topic_filter)
        event = AuditEvent(SUBSCRIBE, client_id, allowed, reason, topic=topic_filter)
        if allowed:
            self._log.info("New subscription: ClientId = %s, TopicFilter = %s",
                           client_id, topic_filter)
        else:
            self._log.warning("Subscription failed for ClientId = %s, TopicFilter = %s, Reason = %s",
                              client_id, topic_filter, reason)
        return self._emit(event)

    def publish(self, client_id, topic, payload, allowed, reason, qos=None, retain=None):
        topic = _text(topic)
        payload = _text(payload) if self.log_payload else None
        event = AuditEvent(PUBLISH, client_id, allowed, reason, topic=topic, payload=payload,
                           qos=qos, retain=retain)
        line = "Message: ClientId = %s, Topic = %s, Payload = %s"
        args = [client_id, topic, payload]
        if qos is not None:
            line += ", QoS = %s"
            args.append(qos)
        if retain is not None:
            line += ", Retain-Flag = %s"
            args.append(retain)
        line += ", Was Accepted=%s"
        args.append(allowed)
        if allowed:
            self._log.info(line, *args)
        else:
            self._log.warning(line + ", Reason = %s", *(args + [reason]))
        return self._emit(event)

    def disconnect(self, client_id, released):
        event = AuditEvent(DISCONNECT, client_id, True, None)
        self._log.info("Client disconnected: ClientId = %s, Released = %s", client_id, released)
        return self._emit(event)

    def _emit(self, event):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                self._log.error("Error in audit listener: %s", e)
        return event
