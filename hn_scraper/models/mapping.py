"""Mapping functions to convert Hacker News API payloads to our data models."""

import html
import logging
from typing import Any, Dict, List

from hn_scraper.errors import DecodeError
from hn_scraper.models.comment import COMMENT_FIELDS, CommentRecord, ThreadRecord

logger = logging.getLogger(__name__)


def coerce_id(value: Any) -> int:
    """
    Convert an item identifier from its JSON form to an int.

    The item API sometimes hands identifiers back as floats (``9996333.0``);
    anything with a fractional part is rejected.

    Raises:
        ValueError: If the value is not an integral number
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid item id: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"Invalid item id: {value!r}")


def item_to_thread(item_id: int, payload: Dict[str, Any]) -> ThreadRecord:
    """
    Convert a raw item payload to a ThreadRecord.

    Args:
        item_id: ID the payload was requested for
        payload: Decoded JSON object from the item API

    Returns:
        ThreadRecord with the direct child IDs in API order

    Raises:
        DecodeError: If the kids list is malformed
    """
    kids = payload.get("kids") or []
    if not isinstance(kids, list):
        raise DecodeError(item_id, f"'kids' must be a list, got {type(kids).__name__}")

    try:
        kid_ids = [coerce_id(kid) for kid in kids]
    except ValueError as e:
        raise DecodeError(item_id, str(e)) from e

    return {"id": item_id, "kids": kid_ids}


def item_to_comment(item_id: int, payload: Dict[str, Any]) -> CommentRecord:
    """
    Convert a raw item payload to a CommentRecord.

    Deleted and dead comments come back without ``by`` or ``text``; they are
    kept with empty strings so a thread with N children resolves to N comments.

    Args:
        item_id: ID the payload was requested for
        payload: Decoded JSON object from the item API

    Returns:
        CommentRecord with the text HTML-unescaped

    Raises:
        DecodeError: If the id or parent fields are malformed
    """
    try:
        comment_id = coerce_id(payload.get("id", item_id))
        parent = coerce_id(payload.get("parent", 0))
    except ValueError as e:
        raise DecodeError(item_id, str(e)) from e

    if payload.get("deleted") or payload.get("dead"):
        logger.debug(f"Comment {comment_id} is deleted or dead")

    record: CommentRecord = {
        "by": payload.get("by") or "",
        "id": comment_id,
        "parent": parent,
        "text": html.unescape(payload.get("text") or ""),
    }
    return record


def _text_field(data: Dict[str, Any], name: str) -> str:
    value = data[name]
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"Field '{name}' must be a string, got {type(value).__name__}")
    return value


def record_from_dict(data: Any) -> CommentRecord:
    """
    Rebuild a CommentRecord from a cached JSON object.

    Raises:
        ValueError: If the object is missing fields or has bad identifiers or text
    """
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

    missing = [name for name in COMMENT_FIELDS if name not in data]
    if missing:
        raise ValueError(f"Missing fields: {', '.join(missing)}")

    return {
        "by": _text_field(data, "by"),
        "id": coerce_id(data["id"]),
        "parent": coerce_id(data["parent"]),
        "text": _text_field(data, "text"),
    }


def records_to_dicts(comments: List[CommentRecord]) -> List[Dict[str, Any]]:
    """Project comments onto the serialized field set, in field order."""
    return [{name: comment[name] for name in COMMENT_FIELDS} for comment in comments]
