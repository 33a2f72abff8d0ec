"""
Configuration management for Modrelay.

- **app_configuration.py**: YAML configuration loader (``config/app_config.yml``)
  combined with environment variables loaded from ``.env``. Exposes the
  destination webhook, guild scope, delivery timeout and normalizer tuning.
  Falls back to defaults on missing or malformed config files.
"""
