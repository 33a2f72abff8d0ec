"""
Modrelay - Discord to automation-webhook event relay

Modrelay listens to a Discord gateway connection and forwards selected events
to a single downstream automation endpoint (usually an n8n router) as
normalized JSON envelopes.

Core Components:

- **Relay Pipeline**: Guild-scope filtering, no-op detection and per-event
  normalization into payloads with a fixed key set
- **Enrichment**: Account age, role deltas, URL extraction and advisory spam
  pattern signals computed per event
- **Dispatcher**: Fire-and-forget HTTP delivery with outcome logging
- **Bootstrap**: Environment/YAML configuration, logging and gateway wiring

Usage:
    from modrelay.main import main
    main()  # Connects to Discord and starts relaying
"""
