"""
JSON serialization helpers built on orjson.

Batches are serialized straight to bytes (no intermediate ``str``), and the
same encoder is used to estimate record sizes so the accumulator's byte
counter tracks what actually goes over the wire.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import orjson

from .errors import SerializationError


def _default(obj: Any) -> Any:
    """Default hook for types orjson does not handle natively."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(exclude_none=True)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    return str(obj)


@dataclass
class SerializedView:
    """Serialized request body."""

    data: bytes


def dumps(value: Any, *, option: int | None = None) -> bytes:
    return orjson.dumps(value, default=_default, option=option)


def serialize_batch(records: Sequence[Mapping[str, Any]]) -> SerializedView:
    """Serialize a batch as a JSON array body."""
    try:
        return SerializedView(data=orjson.dumps(list(records), default=_default))
    except TypeError as e:
        raise SerializationError("Batch serialization failed", cause=e) from e


def estimate_record_size(record: Mapping[str, Any]) -> int:
    """Estimated wire size of one record, in bytes of its JSON encoding.

    This is an approximation of the record's share of the batch body; array
    framing (brackets and commas) is not counted.
    """
    try:
        return len(orjson.dumps(record, default=_default))
    except TypeError:
        return len(str(record).encode("utf-8"))


def parse_line(line: str | bytes | bytearray) -> dict[str, Any]:
    """Parse one NDJSON log line into a mapping.

    Raises:
        SerializationError: if the line is not valid JSON or not an object.
    """
    try:
        value = orjson.loads(line)
    except orjson.JSONDecodeError as e:
        raise SerializationError(f"Invalid JSON log line: {e}", cause=e) from e
    if not isinstance(value, dict):
        raise SerializationError(
            f"Log line must be a JSON object, got {type(value).__name__}"
        )
    return value
