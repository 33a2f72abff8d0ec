"""
Utility helpers for Modrelay.

- **logger.py**: Centralized logging configuration with colored console output
  through prompt_toolkit, a per-process rotating log file, process-boundary
  exception hooks, and suppression of noisy library loggers (Discord
  internals, urllib3, aiohttp).
"""
