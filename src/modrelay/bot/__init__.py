"""
Discord bot cogs for Modrelay.

- **events_listener.py**: Lifecycle logging (on_ready) with the active relay scope.
- **relay_listener.py**: Gateway event handlers that hand raw events to the
  relay pipeline and schedule delivery without waiting on it.
"""
