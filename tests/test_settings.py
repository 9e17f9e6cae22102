"""Tests for configuration loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from pinwise.settings import _CONFIG_KEYS, Settings, generate_env_template, load_config, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestLoadSettings:
    def test_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path)
        assert settings == Settings()
        assert settings.session_db == ":memory:"
        assert settings.model == "llama3.1:8b"
        assert settings.use_tools is False
        assert settings.max_tokens == 800
        assert settings.session_max_age == 24 * 3600

    def test_dotenv_overrides_defaults(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text(
            "# local overrides\nPINWISE_USE_TOOLS=true\nPINWISE_MAX_TOKENS = 400\n\n",
            encoding="utf-8",
        )
        settings = load_settings(tmp_path)
        assert settings.use_tools is True
        assert settings.max_tokens == 400

    def test_env_overrides_dotenv(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / ".env").write_text("PINWISE_MODEL=from-dotenv\n", encoding="utf-8")
        monkeypatch.setenv("PINWISE_MODEL", "from-env")
        assert load_settings(tmp_path).model == "from-env"

    def test_config_json_below_dotenv(self, tmp_path: Path) -> None:
        (tmp_path / ".pinwise").mkdir()
        (tmp_path / ".pinwise" / "config.json").write_text(
            json.dumps({"PINWISE_LOG_LEVEL": "debug", "PINWISE_MODEL": "from-json"}),
            encoding="utf-8",
        )
        (tmp_path / ".env").write_text("PINWISE_MODEL=from-dotenv\n", encoding="utf-8")
        settings = load_settings(tmp_path)
        assert settings.log_level == "DEBUG"
        assert settings.model == "from-dotenv"

    def test_broken_config_json_ignored(self, tmp_path: Path) -> None:
        (tmp_path / ".pinwise").mkdir()
        (tmp_path / ".pinwise" / "config.json").write_text("{oops", encoding="utf-8")
        assert load_config(tmp_path)["PINWISE_LOG_LEVEL"] == "INFO"

    def test_non_object_config_json_ignored(self, tmp_path: Path) -> None:
        (tmp_path / ".pinwise").mkdir()
        (tmp_path / ".pinwise" / "config.json").write_text("[1]", encoding="utf-8")
        assert load_settings(tmp_path) == Settings()

    def test_session_age_in_hours(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PINWISE_SESSION_MAX_AGE_HOURS", "0.5")
        assert load_settings(tmp_path).session_max_age == 1800

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(log_level="LOUD")
        with pytest.raises(ValidationError):
            Settings(max_tokens=0)


class TestEnvTemplate:
    def test_template_lists_every_key(self, tmp_path: Path) -> None:
        path = generate_env_template(tmp_path)
        assert path == tmp_path / ".env.example"
        content = path.read_text(encoding="utf-8")
        for key in _CONFIG_KEYS:
            assert f"{key}=" in content
        assert "PINWISE_USE_TOOLS=false" in content
