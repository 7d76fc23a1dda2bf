"""Small value helpers shared by the policy and verification layers."""

from __future__ import annotations

import json
from typing import Any


def is_number(value: Any) -> bool:
    """Return True for ints and floats. Booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_text(value: Any) -> str:
    """Render a value the way it reads in a JSON payload (``true``, ``null``, ``[1, 2]``)."""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except ValueError:
        return str(value)


def is_present(value: Any) -> bool:
    """Return True unless ``value`` is ``None`` or a blank string. ``0`` and ``False`` are present."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True
