"""
Event enrichment and relay pipeline.

- **pattern_detectors.py**: URL extraction and advisory spam pattern labels.
- **snapshot_differ.py**: Role and nickname deltas between member snapshots.
- **guild_filter.py**: Forward/reject decisions (scope, bot authors, no-op updates).
- **event_normalizer.py**: One payload builder per relayed event kind.
- **dispatcher.py**: Envelope construction and single-attempt HTTP delivery.
- **relay_pipeline.py**: Ties filter, normalizer and dispatcher together per event kind.
"""
