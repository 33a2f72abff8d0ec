"""
Data types shared across the relay.

- **relay_datatypes.py**: Event kinds, spam signal labels, relay events,
  envelopes and delivery outcomes.
- **discord_datatypes.py**: Optional views over py-cord objects (users,
  channels, messages, member snapshots) with a documented default for every
  field, so normalization never depends on what the client happened to cache.
"""
