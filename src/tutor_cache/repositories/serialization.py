"""Conversion between domain entities and flat storage records."""

import json
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

from tutor_cache.entities import (
    PAYLOAD_TYPES,
    CacheEntryEntity,
    CacheFamily,
    CachePayload,
    GradedAnswerEntity,
)


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return "" if value is None else str(value)


def _datetime(value: Any) -> datetime | None:
    text = _text(value)
    if not text:
        return None
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def encode_payload(payload: CachePayload) -> str:
    """Serialize a payload to JSON."""
    return json.dumps(asdict(payload), ensure_ascii=False)


def decode_payload(family: CacheFamily, raw: str | bytes) -> CachePayload:
    """Rebuild a payload from JSON, discriminated by its family tag.

    Raises:
        ValueError: If the JSON does not match the family's payload shape
    """
    data = json.loads(_text(raw))
    payload_type = PAYLOAD_TYPES[family]
    try:
        return payload_type(**data)
    except TypeError as e:
        raise ValueError(f"Invalid {family.value} payload: {e}") from e


def entry_to_mapping(entry: CacheEntryEntity) -> dict[str, str]:
    """Flatten an entry into a string mapping (Redis hash fields)."""
    return {
        "fingerprint": entry.fingerprint,
        "family": entry.family.value,
        "payload": encode_payload(entry.payload),
        "usage_count": str(entry.usage_count),
        "created_at": entry.created_at.isoformat(),
        "last_used_at": entry.last_used_at.isoformat() if entry.last_used_at else "",
        "expires_at": entry.expires_at.isoformat(),
        "tokens_used": "" if entry.tokens_used is None else str(entry.tokens_used),
        "model_used": entry.model_used or "",
    }


def mapping_to_entry(data: dict) -> CacheEntryEntity:
    """Rebuild an entry from its flattened mapping.

    Raises:
        ValueError: If a field is missing or malformed
    """
    fields = {_text(k): v for k, v in data.items()}
    try:
        family = CacheFamily(_text(fields["family"]))
        tokens = _text(fields.get("tokens_used"))
        return CacheEntryEntity(
            fingerprint=_text(fields["fingerprint"]),
            family=family,
            payload=decode_payload(family, fields["payload"]),
            usage_count=int(_text(fields.get("usage_count")) or 0),
            created_at=_datetime(fields["created_at"]),
            last_used_at=_datetime(fields.get("last_used_at")),
            expires_at=_datetime(fields["expires_at"]),
            tokens_used=int(tokens) if tokens else None,
            model_used=_text(fields.get("model_used")) or None,
        )
    except KeyError as e:
        raise ValueError(f"Cache record is missing field {e}") from e


def answer_to_json(answer: GradedAnswerEntity) -> str:
    data = asdict(answer)
    data["graded_at"] = answer.graded_at.isoformat() if answer.graded_at else None
    return json.dumps(data, ensure_ascii=False)


def answer_from_json(raw: str | bytes) -> GradedAnswerEntity:
    data = json.loads(_text(raw))
    data["graded_at"] = _datetime(data.get("graded_at"))
    return GradedAnswerEntity(**data)
