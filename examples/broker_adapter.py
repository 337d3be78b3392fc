"""
Broker Adapter Example
======================

Shows how a broker hands its three extension points to WardenMQTT:
connection validation, subscription interception and publish interception.
The "broker" here is a stand-in that only builds the contexts.

Any broker exposing auth provider hooks (authenticate, authorize_publish,
authorize_subscribe, cleanup_client) can take the provider object directly:

    broker = SomeBroker(config=..., auth=provider)
"""

from wardenmqtt import (
    WardenConfig, Policy, User, build_provider,
    ConnectContext, SubscribeContext, PublishContext,
)

config = WardenConfig(
    port=1883,
    evict_on_disconnect=True,
    users=[
        User('light', 'l1ght', [
            Policy('^lights/living/', use_regex=True, allow_publish=True),
            Policy('lights/living/set', allow_subscribe=True),
        ]),
    ],
)

provider = build_provider(config)

ctx = ConnectContext('light-01', 'light', 'l1ght', endpoint='192.168.1.40:51234')
provider.validate_connection(ctx)
print('CONNACK return code: %d' % ctx.reason_code)

sub = SubscribeContext('light-01', 'lights/living/set')
provider.intercept_subscription(sub)
print('Subscribe %s accepted: %s' % (sub.topic_filter, sub.accept))

pub = PublishContext('light-01', 'lights/living/state', b'{"on": true}', qos=1)
provider.intercept_publish(pub)
print('Publish %s accepted: %s' % (pub.topic, pub.accept))

# Broker-side disconnect; with evict_on_disconnect the binding is dropped
provider.cleanup_client('light-01')
print('Granted QoS after disconnect: %d' % provider.authorize_subscribe('light-01', 'lights/living/set'))
