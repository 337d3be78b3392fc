"""
Policy Walkthrough Example
==========================

Loads examples/config.json and runs a few connect, subscribe and publish
decisions through the engine, the way a broker would call it.

Run from the repository root:
    python examples/policy_walkthrough.py

Or check the same config from the command line:
    python -m wardenmqtt check examples/config.json
    python -m wardenmqtt evaluate examples/config.json --user dashboard \
        --password viewpass --subscribe sensors/temp/kitchen
"""

import os

from wardenmqtt import load_config, build_engine

CONFIG = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.json')

engine = build_engine(load_config(CONFIG))


@engine.audit.add_listener
def show_event(event):
    print('  -> %s' % event.as_dict())


print('[Walkthrough] alice connects')
engine.authenticate('alice-phone', 'alice', 'secret')

# 'home/#' is an exact policy: only the literal filter is allowed
engine.authorize_subscribe('alice-phone', 'home/#')
engine.authorize_subscribe('alice-phone', 'home/kitchen')

# The regex policy is unanchored at the end, so anything below home/alice/ works
engine.authorize_publish('alice-phone', 'home/alice/lights', b'on')
engine.authorize_publish('alice-phone', 'home/bob/lights', b'on')

print('[Walkthrough] sensor publishes readings')
engine.authenticate('esp32-01', 'temp_sensor', 'sensorpass')
engine.authorize_publish('esp32-01', 'sensors/temp/kitchen', b'21.5')
engine.authorize_publish('esp32-01', 'sensors/temp/kitchen/raw', b'0x1f')

print('[Walkthrough] unknown user and unbound client')
engine.authenticate('intruder', 'mallory', 'guess')
engine.authorize_subscribe('intruder', 'sensors/#')

print('[Walkthrough] stats')
for topic, value in sorted(engine.stats_snapshot().items()):
    print('  %s = %s' % (topic, value))
