"""
Helpers for moving between MongoDB documents and API payloads.
"""
import re
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId

from samplehub.core.exceptions import InvalidRequest


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """MongoDB hands back naive datetimes; they are always UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def to_object_id(value: str, label: str = "id") -> ObjectId:
    """
    Parse an ObjectId from a path or token value.

    Raises:
        InvalidRequest: If the value is not a valid ObjectId
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidRequest(f"Invalid {label}")


def serialize_document(document: dict[str, Any], exclude: tuple[str, ...] = ()) -> dict[str, Any]:
    """Copy a document with its _id as string and excluded keys removed."""
    data = {key: value for key, value in document.items() if key not in exclude}
    if "_id" in data:
        data["_id"] = str(data["_id"])
    return data


def contains_pattern(value: str) -> dict[str, Any]:
    """Case-insensitive substring match with user input escaped."""
    return {"$regex": re.escape(value), "$options": "i"}
