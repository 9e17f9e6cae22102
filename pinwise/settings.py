"""Runtime settings — defaults, project config file, .env and environment."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# All known configuration keys with defaults
_CONFIG_KEYS: dict[str, dict[str, Any]] = {
    "PINWISE_SESSION_DB": {"default": ":memory:", "description": "Session database path"},
    "PINWISE_REFERENCE_DB": {"default": ":memory:", "description": "Reference database path"},
    "PINWISE_LOG_LEVEL": {"default": "INFO", "description": "Logging level"},
    "OLLAMA_HOST": {"default": "http://localhost:11434", "description": "Ollama server"},
    "PINWISE_MODEL": {"default": "llama3.1:8b", "description": "Chat model name"},
    "PINWISE_USE_TOOLS": {"default": "false", "description": "Offer the allocate_pins tool to the model"},
    "PINWISE_MAX_TOKENS": {"default": "800", "description": "Maximum reply tokens"},
    "PINWISE_SESSION_MAX_AGE_HOURS": {"default": "24", "description": "Idle hours before a session expires"},
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseModel):
    """Typed view of the merged configuration."""

    session_db: str = ":memory:"
    reference_db: str = ":memory:"
    log_level: str = "INFO"
    ollama_host: str = "http://localhost:11434"
    model: str = "llama3.1:8b"
    use_tools: bool = False
    max_tokens: int = Field(default=800, gt=0)
    session_max_age_hours: float = Field(default=24.0, gt=0)

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level

    @field_validator("use_tools", mode="before")
    @classmethod
    def _parse_bool(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_VALUES
        return value

    @property
    def session_max_age(self) -> float:
        """Session idle limit in seconds."""
        return self.session_max_age_hours * 3600

    @classmethod
    def from_config(cls, config: dict[str, str]) -> Settings:
        """Build settings from a flat ``KEY -> value`` mapping."""
        return cls(
            session_db=config["PINWISE_SESSION_DB"],
            reference_db=config["PINWISE_REFERENCE_DB"],
            log_level=config["PINWISE_LOG_LEVEL"],
            ollama_host=config["OLLAMA_HOST"],
            model=config["PINWISE_MODEL"],
            use_tools=config["PINWISE_USE_TOOLS"],
            max_tokens=config["PINWISE_MAX_TOKENS"],
            session_max_age_hours=config["PINWISE_SESSION_MAX_AGE_HOURS"],
        )


def load_config(project_path: str | Path = ".") -> dict[str, str]:
    """Load merged config: defaults -> .pinwise/config.json -> .env -> env vars.

    Returns a flat dict of configuration values.
    """
    root = Path(project_path)
    config: dict[str, str] = {}

    # 1. Defaults
    for key, info in _CONFIG_KEYS.items():
        config[key] = str(info["default"])

    # 2. .pinwise/config.json
    config_json = root / ".pinwise" / "config.json"
    if config_json.is_file():
        try:
            data = json.loads(config_json.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.debug("Could not read config.json", exc_info=True)
        else:
            if isinstance(data, dict):
                for k, v in data.items():
                    config[k] = str(v)
            else:
                logger.warning("Ignoring %s: top level is not an object", config_json)

    # 3. .env file
    env_file = root / ".env"
    if env_file.is_file():
        try:
            for line in env_file.read_text(encoding="utf-8").splitlines():
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" in line:
                    k, v = line.split("=", 1)
                    config[k.strip()] = v.strip()
        except OSError:
            logger.debug("Could not read .env", exc_info=True)

    # 4. Environment variables override all
    for key in _CONFIG_KEYS:
        env_val = os.environ.get(key)
        if env_val is not None:
            config[key] = env_val

    return config


def load_settings(project_path: str | Path = ".") -> Settings:
    """Merged configuration for *project_path* as a :class:`Settings`."""
    return Settings.from_config(load_config(project_path))


def generate_env_template(project_path: str | Path) -> Path:
    """Create .env.example with all config keys.

    Returns the path to the generated file.
    """
    root = Path(project_path)
    env_path = root / ".env.example"

    lines = ["# Pinwise Configuration Template", "# Copy to .env and fill in values", ""]
    for key, info in _CONFIG_KEYS.items():
        lines.append(f"# {info['description']}")
        lines.append(f"{key}={info['default']}")
        lines.append("")

    env_path.write_text("\n".join(lines), encoding="utf-8")
    return env_path
