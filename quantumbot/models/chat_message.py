"""Embedded chat message documents (stored inside JSON arrays, not a table)."""
import uuid
from datetime import datetime, timezone

ROLES = ("user", "assistant")


def utcnow() -> datetime:
    """Naive UTC; SQLite drops tzinfo on read so columns stay naive everywhere."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def make_message(role: str, content: str) -> dict:
    if role not in ROLES:
        raise ValueError(f"Unknown chat role: {role!r}")
    return {
        "id": uuid.uuid4().hex,
        "role": role,
        "content": content,
        "timestamp": isoformat(utcnow()),
    }
