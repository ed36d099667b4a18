"""
YAML configuration validator for a Ferod project's config.yaml.

Validates structure, required fields, and common misconfigurations.
"""

from __future__ import annotations

import logging
from typing import Any

import discord


logger = logging.getLogger(__name__)


BOOL_KEYS = (
    "dev",
    "edit_application_commands",
    "delete_unused_application_commands",
    "command_loaded_message",
)
PATH_KEYS = ("commands_path", "event_listeners_path")
KNOWN_KEYS = {*BOOL_KEYS, *PATH_KEYS, "dev_guild_id", "intents"}


class ConfigValidationError(Exception):
    """Raised when config validation fails."""
    pass


def _is_snowflake(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value > 0
    return isinstance(value, str) and value.isdigit()


def validate_config(cfg: dict[str, Any], config_path: str = "config.yaml") -> None:
    """
    Comprehensive validation of config.yaml structure and content.

    Raises ConfigValidationError if validation fails.
    Logs detailed error messages before raising.

    Args:
        cfg: The loaded config dictionary
        config_path: Path to config file (for error messages)

    Raises:
        ConfigValidationError: If validation fails
    """
    errors = []
    warnings = []

    # ── Check root structure ────────────────────────────────────────────────
    if not isinstance(cfg, dict):
        errors.append(f"Config root must be a mapping, got {type(cfg).__name__}")
        cfg = {}

    # ── Check required paths ────────────────────────────────────────────────
    for key in PATH_KEYS:
        if key not in cfg:
            errors.append(f"Missing required top-level key: '{key}'")
        elif not isinstance(cfg[key], str) or not cfg[key].strip():
            errors.append(f"'{key}' must be a non-empty string, got {cfg[key]!r}")

    # ── Check flags ─────────────────────────────────────────────────────────
    for key in BOOL_KEYS:
        if key in cfg and not isinstance(cfg[key], bool):
            errors.append(f"'{key}' must be boolean, got {type(cfg[key]).__name__}")

    # ── Validate dev guild ──────────────────────────────────────────────────
    if "dev_guild_id" in cfg and cfg["dev_guild_id"] is not None:
        if not _is_snowflake(cfg["dev_guild_id"]):
            errors.append(f"'dev_guild_id' must be a guild id (digits), got {cfg['dev_guild_id']!r}")
    if cfg.get("dev") is True and cfg.get("dev_guild_id") is None:
        errors.append("'dev_guild_id' must be provided if 'dev' is true")

    # ── Validate intents ────────────────────────────────────────────────────
    if "intents" in cfg:
        intents = cfg["intents"]
        if not isinstance(intents, list):
            errors.append(
                f"'intents' must be a list, got {type(intents).__name__}. "
                f"Use: intents:\n  - \"message_content\"\n  - \"members\""
            )
        else:
            for i, name in enumerate(intents):
                if not isinstance(name, str):
                    errors.append(f"'intents[{i}]' must be a string, got {type(name).__name__}")
                elif name not in discord.Intents.VALID_FLAGS:
                    errors.append(
                        f"'intents[{i}]' unknown intent '{name}'. "
                        f"Valid intents: {', '.join(sorted(discord.Intents.VALID_FLAGS))}"
                    )

    # ── Unknown keys ────────────────────────────────────────────────────────
    for key in cfg:
        if key not in KNOWN_KEYS:
            warnings.append(f"Unknown key '{key}' is ignored")

    # ── Log warnings ────────────────────────────────────────────────────────
    for warning in warnings:
        logger.warning("Config warning: %s", warning)

    # ── Log errors and raise if any ─────────────────────────────────────────
    if errors:
        logger.error("=" * 70)
        logger.error("CONFIG VALIDATION FAILED (%s)", config_path)
        logger.error("=" * 70)
        for i, error in enumerate(errors, 1):
            logger.error("[%d] %s", i, error)
        logger.error("=" * 70)
        logger.error("Please fix the errors above and restart the bot.")
        logger.error("=" * 70)
        raise ConfigValidationError(f"Config validation failed with {len(errors)} error(s)")
