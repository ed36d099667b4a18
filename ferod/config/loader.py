from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .validator import validate_config, ConfigValidationError


DEFAULT_CONFIG_FILE = "config.yaml"
CONFIG_ENV_VAR = "FEROD_CONFIG"
TOKEN_ENV_VARS = ("DISCORD_TOKEN", "TOKEN")


def get_config_path() -> str:
    """
    Resolve the config path, preferring an explicit environment override.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return env_path
    return DEFAULT_CONFIG_FILE


def _load_raw_config(path: str | os.PathLike[str] | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    try:
        with open(cfg_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        logging.error("Config file not found: %s", cfg_path)
        raise ConfigValidationError(f"Config file not found: {cfg_path}") from e
    except yaml.YAMLError as e:
        logging.error("YAML parsing error in %s: %s", cfg_path, e)
        raise ConfigValidationError(f"YAML parsing error in {cfg_path}") from e

    if not isinstance(data, dict):
        logging.error("Config root must be a mapping, got %s", type(data).__name__)
        raise ConfigValidationError("Config root must be a mapping")

    return data


def get_config(path: str | os.PathLike[str] | None = None) -> dict[str, Any]:
    """
    Public helper for loading configuration.

    - Respects FEROD_CONFIG if set.
    - Performs comprehensive YAML validation.
    - Raises ConfigValidationError if the file is missing or invalid.
    - Returns the raw dict; ClientOptions.from_mapping turns it into options.
    """
    cfg_path = path or get_config_path()
    cfg = _load_raw_config(cfg_path)
    validate_config(cfg, str(cfg_path))
    return cfg


def get_token(env_file: str | os.PathLike[str] | None = None) -> str:
    """
    Read the bot token from the environment, loading a .env file first.
    """
    load_dotenv(env_file or Path.cwd() / ".env")
    for name in TOKEN_ENV_VARS:
        token = os.environ.get(name)
        if token:
            return token
    logging.error("Missing Discord token; set %s in the environment or .env", TOKEN_ENV_VARS[0])
    raise ConfigValidationError("Missing Discord token")
