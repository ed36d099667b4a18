"""
Structural comparison of application command payloads.

Discord omits defaults that we may send explicitly (and vice versa), so both
sides are projected onto the fields we manage and stripped of empty values
before comparing.
"""

from __future__ import annotations

from typing import Any


COMMAND_KEYS = ("name", "type", "description", "options", "default_member_permissions")
OPTION_KEYS = (
    "name",
    "type",
    "description",
    "required",
    "choices",
    "options",
    "min_value",
    "max_value",
    "min_length",
    "max_length",
    "autocomplete",
    "channel_types",
)
CHOICE_KEYS = ("name", "value")


def _is_empty(value: Any) -> bool:
    # 0 is a meaningful value (min_value, permission bits), False is a default
    return value is None or value is False or (isinstance(value, (str, list, tuple, dict)) and not value)


def clean(value: Any) -> Any:
    """Recursively drop None, False and empty containers/strings from mappings."""
    if isinstance(value, dict):
        cleaned = {k: clean(v) for k, v in value.items()}
        return {k: v for k, v in cleaned.items() if not _is_empty(v)}
    if isinstance(value, (list, tuple)):
        return [clean(v) for v in value]
    return value


def canonical_permissions(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(getattr(value, "value", value))


def _project_option(option: dict[str, Any]) -> dict[str, Any]:
    data = {k: option[k] for k in OPTION_KEYS if k in option}
    if "type" in data:
        data["type"] = int(data["type"])
    if data.get("choices"):
        data["choices"] = [{k: c[k] for k in CHOICE_KEYS if k in c} for c in data["choices"]]
    if data.get("options"):
        data["options"] = [_project_option(o) for o in data["options"]]
    return data


def project(payload: dict[str, Any]) -> dict[str, Any]:
    data = {k: payload.get(k) for k in COMMAND_KEYS}
    if data["type"] is not None:
        data["type"] = int(data["type"])
    data["options"] = [_project_option(o) for o in data["options"] or ()]
    data["default_member_permissions"] = canonical_permissions(data["default_member_permissions"])
    return clean(data)


def commands_equal(local: dict[str, Any], remote: dict[str, Any]) -> bool:
    return project(local) == project(remote)
