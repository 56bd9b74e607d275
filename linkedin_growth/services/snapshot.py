"""Helpers over LinkedIn DMA snapshot payloads.

The Member Data Portability API returns snapshots shaped as:

    {"elements": [{"snapshotDomain": "MEMBER_SHARE_INFO", "snapshotData": [record, ...]}]}

Records are loosely typed: counts arrive as strings ("12"), keys may be
capitalised ("LikesCount") or camelCase ("likesCount"), and dates come either
as ISO 8601 or as "YYYY-MM-DD HH:MM:SS". Everything here is pure and tolerant
of malformed input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
import re
from typing import Any

Record = dict[str, Any]


class MediaType(str, Enum):
    """Post media types as reported by MEMBER_SHARE_INFO."""

    TEXT = "TEXT"
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    ARTICLE = "ARTICLE"
    CAROUSEL = "CAROUSEL"
    POLL = "POLL"
    DOCUMENT = "DOCUMENT"


class SnapshotDomain:
    """Snapshot domain names used by this service."""

    PROFILE = "PROFILE"
    CONNECTIONS = "CONNECTIONS"
    MEMBER_SHARE_INFO = "MEMBER_SHARE_INFO"
    ALL_COMMENTS = "ALL_COMMENTS"
    ALL_LIKES = "ALL_LIKES"
    SKILLS = "SKILLS"
    POSITIONS = "POSITIONS"
    EDUCATION = "EDUCATION"

    ALL = (
        PROFILE,
        CONNECTIONS,
        MEMBER_SHARE_INFO,
        ALL_COMMENTS,
        ALL_LIKES,
        SKILLS,
        POSITIONS,
        EDUCATION,
    )


_LEADING_INT_RE = re.compile(r"^\s*\+?(\d+)")


def snapshot_records(payload: Any, domain: str | None = None) -> list[Record]:
    """Extract records from a snapshot payload.

    Without `domain`, returns the records of the first element (what every
    single-domain fetch needs). With `domain`, concatenates the records of every
    element whose snapshotDomain matches.
    """
    if not isinstance(payload, dict):
        return []
    elements = payload.get("elements")
    if not isinstance(elements, list) or not elements:
        return []

    if domain is None:
        first = elements[0]
        if not isinstance(first, dict):
            return []
        data = first.get("snapshotData")
        return [r for r in data if isinstance(r, dict)] if isinstance(data, list) else []

    out: list[Record] = []
    for element in elements:
        if not isinstance(element, dict) or element.get("snapshotDomain") != domain:
            continue
        data = element.get("snapshotData")
        if isinstance(data, list):
            out.extend(r for r in data if isinstance(r, dict))
    return out


def first_record(payload: Any) -> Record:
    records = snapshot_records(payload)
    return records[0] if records else {}


def parse_count(value: Any) -> int:
    """Parse a loosely-typed count ("12", "12 likes", 12.7, None) to int."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        try:
            return max(0, int(value))
        except (OverflowError, ValueError):
            return 0
    m = _LEADING_INT_RE.match(str(value))
    return int(m.group(1)) if m else 0


def _first_present(record: Record, *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def record_likes(record: Record) -> int:
    return parse_count(_first_present(record, "LikesCount", "likesCount"))


def record_comments(record: Record) -> int:
    return parse_count(_first_present(record, "CommentsCount", "commentsCount"))


def record_shares(record: Record) -> int:
    return parse_count(_first_present(record, "SharesCount", "sharesCount"))


def record_engagement(record: Record) -> int:
    """Likes + comments (the engagement measure used by the scorers)."""
    return record_likes(record) + record_comments(record)


def record_media_type(record: Record) -> str:
    value = _first_present(record, "MediaType", "mediaType")
    return str(value) if value else MediaType.TEXT.value


def record_text(record: Record) -> str:
    value = _first_present(record, "ShareCommentary", "shareCommentary", "Commentary", "Text")
    return str(value) if value else ""


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO 8601 or "YYYY-MM-DD HH:MM:SS" string; naive values are UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        # Epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        s = str(value).strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            try:
                dt = datetime.strptime(s, "%Y-%m-%d %H:%M:%S")
            except ValueError:
                return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_record_date(record: Record) -> datetime | None:
    return parse_datetime(_first_present(record, "Date", "date"))


def sorted_record_dates(records: list[Record]) -> list[datetime]:
    """Parseable record dates, oldest first."""
    return sorted(d for d in (parse_record_date(r) for r in records) if d is not None)


def to_epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)
