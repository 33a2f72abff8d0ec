import textwrap
from pathlib import Path

import pytest

from modrelay.configuration.app_configuration import AppConfig
from modrelay.datatypes.relay_datatypes import SpamSignal
from modrelay.relay.event_normalizer import NormalizerSettings
from modrelay.relay.pattern_detectors import detect_spam_patterns


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "app_config.yml"


def write_config(path: Path, content: str) -> None:
    path.write_text(textwrap.dedent(content), encoding="utf-8")


def test_app_config_reload_parses_yaml(config_path: Path) -> None:
    write_config(
        config_path,
        """
        relay:
          webhook_url: "https://n8n.example/hook"
          guild_id: "111"
          request_timeout_seconds: 2.5
        normalizer:
          new_account_days: 14
          dm_channel_label: "privado"
        spam_detection:
          research_tools: ["Obsidian"]
        """,
    )

    config = AppConfig(config_path, environ={})

    assert config.webhook_url == "https://n8n.example/hook"
    assert config.guild_id == "111"
    assert config.request_timeout == pytest.approx(2.5)

    settings = config.normalizer_settings
    assert settings.new_account_days == 14
    assert settings.dm_channel_label == "privado"
    assert settings.unknown_channel_label == "unknown"
    assert SpamSignal.SHARED_TOOL in detect_spam_patterns("uso Obsidian", settings.spam_rules)


def test_environment_takes_precedence(config_path: Path) -> None:
    write_config(
        config_path,
        """
        relay:
          webhook_url: "https://yaml.example/hook"
          guild_id: "111"
        """,
    )

    config = AppConfig(config_path, environ={"N8N_ROUTER_URL": " https://env.example/hook ", "GUILD_ID": "222"})

    assert config.webhook_url == "https://env.example/hook"
    assert config.guild_id == "222"


def test_app_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = AppConfig(tmp_path / "does_not_exist.yml", environ={})

    assert config.reload() == {}
    assert config.webhook_url == ""
    assert config.guild_id == ""
    assert config.request_timeout is None
    defaults = NormalizerSettings()
    settings = config.normalizer_settings
    assert settings.new_account_days == defaults.new_account_days
    assert settings.uncached_content_placeholder == "[mensaje no cacheado]"
    assert "Perplexity" in config.research_tools


def test_non_mapping_yaml_is_ignored(config_path: Path) -> None:
    write_config(config_path, "- just\n- a list\n")

    config = AppConfig(config_path, environ={})

    assert config.reload() == {}


def test_invalid_values_fall_back(config_path: Path) -> None:
    write_config(
        config_path,
        """
        relay: "not a mapping"
        normalizer:
          new_account_days: "soon"
        spam_detection:
          research_tools: "Zotero"
        """,
    )

    config = AppConfig(config_path, environ={})

    assert config.webhook_url == ""
    assert config.new_account_days == 7
    assert "Zotero" in config.research_tools
    assert len(config.research_tools) > 1


@pytest.mark.parametrize("value", [0, -1, "abc"])
def test_request_timeout_rejects_unusable_values(config_path: Path, value) -> None:
    write_config(config_path, f"relay:\n  request_timeout_seconds: {value!r}\n")

    assert AppConfig(config_path, environ={}).request_timeout is None


def test_repo_config_file_loads() -> None:
    repo_config = Path(__file__).parents[1] / "config" / "app_config.yml"

    config = AppConfig(repo_config, environ={})

    assert config.section("normalizer")["new_account_days"] == 7
    assert config.request_timeout is None
