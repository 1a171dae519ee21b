"""Readers for the loosely-typed action parameter mapping.

Parameters arrive from a CLI, an agent tool call, or a JSON payload, so
every value is untrusted.  These helpers coerce and validate one key at a
time and raise ``ValidationError`` with a ``"<label> required"`` message
when a required value is missing.
"""

from __future__ import annotations

import json
import math
from typing import Any

from courier.errors import ValidationError
from courier.outbound.action_spec import action_target_mode


def read_string_param(
    params: dict[str, Any],
    key: str,
    *,
    required: bool = False,
    trim: bool = True,
    allow_empty: bool = False,
    label: str | None = None,
) -> str | None:
    label = label or key
    raw = params.get(key)
    if not isinstance(raw, str):
        if required:
            raise ValidationError(f"{label} required")
        return None
    value = raw.strip() if trim else raw
    if not value and not allow_empty:
        if required:
            raise ValidationError(f"{label} required")
        return None
    return value


def read_string_array_param(
    params: dict[str, Any],
    key: str,
    *,
    required: bool = False,
    label: str | None = None,
) -> list[str] | None:
    """Accept a list of strings or a single string; blanks are dropped."""
    label = label or key
    raw = params.get(key)
    values: list[str] | None = None
    if isinstance(raw, list | tuple):
        values = [str(v).strip() for v in raw if v is not None and str(v).strip()]
    elif isinstance(raw, str) and raw.strip():
        values = [raw.strip()]
    if not values:
        if required:
            raise ValidationError(f"{label} required")
        return None
    return values


def read_number_param(
    params: dict[str, Any],
    key: str,
    *,
    required: bool = False,
    integer: bool = False,
    label: str | None = None,
) -> float | int | None:
    label = label or key
    raw = params.get(key)
    value: float | None = None
    if isinstance(raw, bool):
        value = None
    elif isinstance(raw, int | float) and math.isfinite(raw):
        value = float(raw)
    elif isinstance(raw, str) and raw.strip():
        try:
            parsed = float(raw.strip())
        except ValueError:
            parsed = math.nan
        if math.isfinite(parsed):
            value = parsed
    if value is None:
        if required:
            raise ValidationError(f"{label} required")
        return None
    return int(value) if integer else value


def read_boolean_param(params: dict[str, Any], key: str) -> bool | None:
    """Real booleans, or the strings ``"true"``/``"false"`` (any case)."""
    raw = params.get(key)
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return None


def parse_buttons_param(params: dict[str, Any]) -> None:
    """Parse a JSON ``buttons`` string in place; blank removes the key."""
    raw = params.get("buttons")
    if not isinstance(raw, str):
        return
    trimmed = raw.strip()
    if not trimmed:
        del params["buttons"]
        return
    try:
        params["buttons"] = json.loads(trimmed)
    except json.JSONDecodeError:
        raise ValidationError("--buttons must be valid JSON") from None


def apply_target_to_params(action: str, params: dict[str, Any]) -> None:
    """Move a generic ``target`` onto the action's concrete key.

    ``to`` for destination actions, ``channelId`` for channel-management
    actions.  Actions that take no destination reject a target outright.
    """
    raw = params.get("target")
    target = raw.strip() if isinstance(raw, str) else ""
    if not target:
        return
    mode = action_target_mode(action)
    if mode == "to":
        params["to"] = target
    elif mode == "channelId":
        params["channelId"] = target
    else:
        raise ValidationError(f"Action {action} does not accept a target.")
