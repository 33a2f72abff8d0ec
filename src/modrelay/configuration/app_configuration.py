from __future__ import annotations
from pathlib import Path
import fcntl
import os
from typing import Any, Dict, List, Mapping
import yaml

from modrelay.relay.event_normalizer import (
    DM_CHANNEL_LABEL,
    NEW_ACCOUNT_DAYS,
    UNCACHED_CONTENT_PLACEHOLDER,
    UNKNOWN_CHANNEL_LABEL,
    NormalizerSettings,
)
from modrelay.relay.pattern_detectors import DEFAULT_RESEARCH_TOOLS, build_spam_rules
from modrelay.util.logger import get_logger

logger = get_logger("app_configuration")


WEBHOOK_URL_ENV = "N8N_ROUTER_URL"
GUILD_ID_ENV = "GUILD_ID"


class AppConfig:
    """File-lock based accessor around the relay configuration.

    Values come from two places. Deployment secrets and targets (webhook URL,
    guild scope) are read from the process environment first, which
    ``main.load_environment`` populates from ``.env``. The YAML file at
    ``./config/app_config.yml`` supplies fallbacks for those plus the
    normalizer and delivery tuning. Configuration is read once and does not
    change for the lifetime of the process unless :meth:`reload` is called.
    """

    def __init__(self, config_path: Path, environ: Mapping[str, str] | None = None) -> None:
        self.config_path = config_path
        self.environ = environ if environ is not None else os.environ
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                # Acquire a shared lock for reading
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)

                # Release the lock
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found; using defaults.", self.config_path)
            return {}
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            if data is not None:
                logger.error("[APP CONFIGURATION] Config %s is not a mapping; using defaults.", self.config_path)
            return {}
        return data

    def section(self, name: str) -> Dict[str, Any]:
        """Return a top-level mapping section, or an empty dict if absent or malformed."""
        value = self._data.get(name, {})
        return value if isinstance(value, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    # --------------------------
    # Relay target
    # --------------------------
    @property
    def webhook_url(self) -> str:
        """Destination URL for envelopes; empty string when not configured."""
        value = self.environ.get(WEBHOOK_URL_ENV) or self.section("relay").get("webhook_url") or ""
        return str(value).strip()

    @property
    def guild_id(self) -> str:
        """Guild scope; empty string means every guild is relayed."""
        value = self.environ.get(GUILD_ID_ENV) or self.section("relay").get("guild_id") or ""
        return str(value).strip()

    @property
    def request_timeout(self) -> float | None:
        """Delivery timeout in seconds, or None to keep the HTTP transport default."""
        value = self.section("relay").get("request_timeout_seconds")
        if value is None:
            return None
        try:
            timeout = float(value)
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] Invalid request_timeout_seconds %r; ignoring.", value)
            return None
        return timeout if timeout > 0 else None

    # --------------------------
    # Normalizer tuning
    # --------------------------
    @property
    def new_account_days(self) -> int:
        value = self.section("normalizer").get("new_account_days", NEW_ACCOUNT_DAYS)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] Invalid new_account_days %r; using %d.", value, NEW_ACCOUNT_DAYS)
            return NEW_ACCOUNT_DAYS

    @property
    def research_tools(self) -> List[str]:
        """Tool names that trigger the shared-tool spam signal."""
        tools = self.section("spam_detection").get("research_tools")
        if not isinstance(tools, list):
            return list(DEFAULT_RESEARCH_TOOLS)
        return [str(tool) for tool in tools if tool]

    @property
    def normalizer_settings(self) -> NormalizerSettings:
        """Build the normalizer settings from the ``normalizer`` and ``spam_detection`` sections."""
        normalizer = self.section("normalizer")
        return NormalizerSettings(
            new_account_days=self.new_account_days,
            dm_channel_label=str(normalizer.get("dm_channel_label") or DM_CHANNEL_LABEL),
            unknown_channel_label=str(normalizer.get("unknown_channel_label") or UNKNOWN_CHANNEL_LABEL),
            uncached_content_placeholder=str(
                normalizer.get("uncached_content_placeholder") or UNCACHED_CONTENT_PLACEHOLDER
            ),
            spam_rules=build_spam_rules(self.research_tools),
        )
