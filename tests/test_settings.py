from __future__ import annotations

import logging

import pytest

from shelflife import settings as settings_module
from shelflife.settings import Settings

ENV_NAMES = ["TZ", "EXPIRY_SOON_DAYS", "MAX_OCR_TEXT_LENGTH"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    # setenv first so monkeypatch restores the original state even for
    # variables a .env file injects during the test.
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    settings_module.reset_settings_state()
    yield
    settings_module.reset_settings_state()


def test_defaults_when_environment_is_empty() -> None:
    settings = Settings.load()

    assert settings.timezone is None
    assert settings.soon_threshold_days == 7
    assert settings.max_text_length == 10_000


@pytest.mark.parametrize(
    "env_value,expected",
    [
        ("0", 0),
        ("3", 3),
        (" 14 ", 14),
    ],
)
def test_soon_threshold_from_env(monkeypatch: pytest.MonkeyPatch, env_value: str, expected: int) -> None:
    monkeypatch.setenv("EXPIRY_SOON_DAYS", env_value)

    assert Settings.load().soon_threshold_days == expected


@pytest.mark.parametrize("env_value", ["-1", "15", "soon"])
def test_invalid_soon_threshold(monkeypatch: pytest.MonkeyPatch, env_value: str) -> None:
    monkeypatch.setenv("EXPIRY_SOON_DAYS", env_value)

    with pytest.raises(RuntimeError) as excinfo:
        Settings.load()

    assert "EXPIRY_SOON_DAYS" in str(excinfo.value)


@pytest.mark.parametrize("env_value", ["JST-9", ":/etc/localtime", "Not/A_Zone"])
def test_non_iana_timezone_is_ignored(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture, env_value: str
) -> None:
    monkeypatch.setenv("TZ", env_value)

    with caplog.at_level(logging.WARNING, logger="shelflife.settings"):
        settings = Settings.load()

    assert settings.timezone is None
    assert "Ignoring TZ" in caplog.text


def test_loads_from_env_file(tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("EXPIRY_SOON_DAYS=3\nMAX_OCR_TEXT_LENGTH=2048\n")

    settings = Settings.load()

    assert settings.soon_threshold_days == 3
    assert settings.max_text_length == 2048


def test_get_settings_is_cached() -> None:
    assert settings_module.get_settings() is settings_module.get_settings()
