"""Parsing of untyped generation output into structured data."""

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?```$", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence, if any."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    if match:
        return match.group(1).strip()
    return stripped


def parse_structured(text: str | None) -> dict[str, Any] | None:
    """Parse model output expected to be a JSON object.

    Args:
        text: Raw completion text

    Returns:
        The decoded object, or None when the text is not a JSON object
    """
    if not text:
        return None
    try:
        data = json.loads(strip_code_fences(text))
    except (json.JSONDecodeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def as_str_list(value: Any) -> list[str]:
    """Coerce a decoded JSON value into a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return [str(value)]


def as_dict_list(value: Any) -> list[dict[str, Any]]:
    """Keep only the object items of a decoded JSON list."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]
