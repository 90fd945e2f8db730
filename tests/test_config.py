from __future__ import annotations

from pathlib import Path

import pytest

from callroute.config import load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path: Path) -> None:
    for key in (
        "CALLROUTE_CONFIG",
        "CALLROUTE_LOG_LEVEL",
        "CALLROUTE_JSON_LOGGING",
        "CALLROUTE_TIMEZONE",
        "CALLROUTE_EVALUATION_TIMEOUT_SECONDS",
        "CALLROUTE_DATABASE_PATH",
    ):
        monkeypatch.delenv(key, raising=False)
    # Keep a developer's ./.env out of the picture.
    monkeypatch.chdir(tmp_path)


def test_defaults() -> None:
    settings = load_settings()
    assert settings.timezone == "UTC"
    assert settings.log_level == "INFO"
    assert settings.json_logging is False
    assert settings.evaluation_timeout_seconds == 5.0
    assert settings.database_path == Path("callroute.sqlite3")


def test_yaml_then_dotenv_then_os_env(monkeypatch, tmp_path: Path) -> None:
    yaml_path = tmp_path / "callroute.yaml"
    yaml_path.write_text(
        "timezone: America/Chicago\nlog_level: DEBUG\ndatabase_path: /var/lib/callroute.db\n",
        encoding="utf-8",
    )
    env_path = tmp_path / "custom.env"
    env_path.write_text(
        "CALLROUTE_TIMEZONE=Europe/Berlin\nCALLROUTE_JSON_LOGGING=true\n", encoding="utf-8"
    )
    monkeypatch.setenv("CALLROUTE_LOG_LEVEL", "WARNING")

    settings = load_settings(yaml_path=yaml_path, env_path=env_path)
    assert settings.timezone == "Europe/Berlin"
    assert settings.json_logging is True
    assert settings.log_level == "WARNING"
    assert settings.database_path == Path("/var/lib/callroute.db")


def test_config_path_from_environment(monkeypatch, tmp_path: Path) -> None:
    yaml_path = tmp_path / "from-env.yaml"
    yaml_path.write_text("timezone: Asia/Tokyo\n", encoding="utf-8")
    monkeypatch.setenv("CALLROUTE_CONFIG", str(yaml_path))
    assert load_settings().timezone == "Asia/Tokyo"


@pytest.mark.parametrize("raw", ["", "none", "0", "-1"])
def test_timeout_can_be_disabled(monkeypatch, raw: str) -> None:
    monkeypatch.setenv("CALLROUTE_EVALUATION_TIMEOUT_SECONDS", raw)
    assert load_settings().evaluation_timeout_seconds is None


def test_timeout_from_env(monkeypatch) -> None:
    monkeypatch.setenv("CALLROUTE_EVALUATION_TIMEOUT_SECONDS", "2.5")
    assert load_settings().evaluation_timeout_seconds == 2.5
