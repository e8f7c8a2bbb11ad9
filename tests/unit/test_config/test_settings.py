"""Unit tests for settings and the topics file loader."""
from __future__ import annotations

import json

import pytest

from portent.config import Settings, get_settings, load_topics
from portent.main import build_bot, main
from portent.utils.exceptions import ConfigurationError


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("API_KEY", "key")
    monkeypatch.setenv("BOT_TOKEN", "123:token")
    monkeypatch.setenv("FOLDER_ID", "folder")
    return monkeypatch


@pytest.mark.unit
def test_settings_from_environment(env) -> None:
    settings = get_settings()

    assert settings.api_key == "key"
    assert settings.bot_token == "123:token"
    assert settings.folder_id == "folder"
    assert settings.poll_limit == 100
    assert settings.poll_timeout == 30
    assert settings.model_name == "yandexgpt-lite"


@pytest.mark.unit
def test_missing_environment_values_are_named(env) -> None:
    env.delenv("BOT_TOKEN")
    env.setenv("FOLDER_ID", "")

    with pytest.raises(ConfigurationError) as exc_info:
        get_settings()

    assert "BOT_TOKEN" in str(exc_info.value)
    assert "FOLDER_ID" in str(exc_info.value)
    assert "API_KEY" not in str(exc_info.value)


@pytest.mark.unit
def test_load_topics_dedupes_in_order(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"units": ["кот", "кофе", "кот", "дождь"]}), encoding="utf-8")

    assert load_topics(path) == ("кот", "кофе", "дождь")


@pytest.mark.unit
def test_load_topics_missing_file(tmp_path) -> None:
    with pytest.raises(ConfigurationError):
        load_topics(tmp_path / "absent.json")


@pytest.mark.unit
def test_load_topics_invalid_json(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{units: ", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_topics(path)


@pytest.mark.unit
def test_load_topics_rejects_empty_list(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"units": []}), encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_topics(path)


@pytest.mark.unit
def test_build_bot_registers_handler(env) -> None:
    settings = Settings(_env_file=None)

    bot = build_bot(settings, ("A", "B"))

    assert len(bot._handlers) == 1
    assert bot.poll_timeout == settings.poll_timeout
    assert bot.dispatcher.max_in_flight == settings.max_concurrent_handlers


@pytest.mark.unit
async def test_main_exits_when_environment_incomplete(env) -> None:
    env.delenv("API_KEY")

    with pytest.raises(SystemExit) as exc_info:
        await main()

    assert exc_info.value.code == 1


@pytest.mark.unit
async def test_main_exits_when_settings_file_missing(env) -> None:
    env.setenv("SETTINGS_PATH", "missing.json")

    with pytest.raises(SystemExit) as exc_info:
        await main()

    assert exc_info.value.code == 1


@pytest.mark.unit
def test_log_level_is_normalized(env) -> None:
    env.setenv("LOG_LEVEL", "debug")

    assert get_settings().log_level == "DEBUG"


@pytest.mark.unit
def test_invalid_log_level_is_a_configuration_error(env) -> None:
    env.setenv("LOG_LEVEL", "LOUD")

    with pytest.raises(ConfigurationError) as exc_info:
        get_settings()

    assert "log_level" in str(exc_info.value)


@pytest.mark.unit
async def test_main_exits_on_invalid_log_level(env) -> None:
    env.setenv("LOG_LEVEL", "LOUD")

    with pytest.raises(SystemExit) as exc_info:
        await main()

    assert exc_info.value.code == 1


@pytest.mark.unit
def test_build_bot_passes_completion_timeout(env) -> None:
    env.setenv("COMPLETION_TIMEOUT_SECONDS", "12.5")
    settings = Settings(_env_file=None)

    bot = build_bot(settings, ("A", "B"))

    assert bot._handlers[0].completion_service.timeout_seconds == 12.5
