"""Configuration loading for shellrelay."""

import json
import logging
import os
from pathlib import Path

from shellrelay.models import RelayConfig

log = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".shellrelay"
CONFIG_FILE = CONFIG_DIR / "config.json"

ENV_OVERRIDES = {
    "SHELLRELAY_SHELL": "shell",
    "SHELLRELAY_CWD": "working_dir",
    "SHELLRELAY_ENCODING": "encoding",
    "SHELLRELAY_JOIN_TIMEOUT": "join_timeout",
}


def _read_config_file(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as e:
        log.debug("ignoring unreadable config %s: %s", path, e)
        return {}
    if not isinstance(payload, dict):
        log.debug("ignoring config %s: top level is not an object", path)
        return {}
    return payload


def load_config(path: Path | None = None) -> RelayConfig:
    """Load config from disk, then apply environment overrides.

    Raises pydantic.ValidationError when a value is invalid.
    """
    data = _read_config_file(path if path is not None else CONFIG_FILE)
    for env_key, field in ENV_OVERRIDES.items():
        value = os.environ.get(env_key, "").strip()
        if value:
            data[field] = value
    log.debug("config=%s", data)
    return RelayConfig.model_validate(data)
