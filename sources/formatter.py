# =============================================================================
# Nostr Daily News - Item Formatter
# =============================================================================
"""
Normalize relay events and feed entries into FormattedRecords and render
them as text.

A record that cannot be normalized is replaced by a placeholder record so
one bad item never breaks a batch.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from dateutil import parser as date_parser

from sources.models import FeedEntry, FormattedRecord, RelayEvent, SourceItem

logger = logging.getLogger(__name__)

UNKNOWN_DATE = "Unknown date"
UNKNOWN_TITLE = "Unknown title"
UNKNOWN_AUTHOR = "Unknown"

ITEM_SEPARATOR = "\n\n"

# RFC 822 zone names, in seconds east of UTC
RFC822_ZONES = {
    "UT": 0, "GMT": 0, "Z": 0,
    "EST": -5 * 3600, "EDT": -4 * 3600,
    "CST": -6 * 3600, "CDT": -5 * 3600,
    "MST": -7 * 3600, "MDT": -6 * 3600,
    "PST": -8 * 3600, "PDT": -7 * 3600,
}


# =============================================================================
# Date Helpers
# =============================================================================

def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def timestamp_to_iso(timestamp: int) -> str:
    return to_iso(datetime.fromtimestamp(timestamp, tz=timezone.utc))


def date_string_to_iso(value: str) -> str:
    """Parse an RFC 822 / ISO-8601 date string; naive dates are taken as UTC."""
    return to_iso(date_parser.parse(value, tzinfos=RFC822_ZONES))


# =============================================================================
# Normalization
# =============================================================================

def normalize(item: SourceItem) -> FormattedRecord:
    """Project a RelayEvent or FeedEntry onto a FormattedRecord."""
    try:
        if isinstance(item, RelayEvent):
            return _normalize_event(item)
        if isinstance(item, FeedEntry):
            return _normalize_entry(item)
    except Exception as e:
        logger.warning(f"Could not format {type(item).__name__}: {e}")
        return FormattedRecord(
            display_date=UNKNOWN_DATE,
            title=UNKNOWN_TITLE,
            author=UNKNOWN_AUTHOR,
            content=f"Error formatting item: {e}",
        )
    raise TypeError(f"Unsupported source item: {type(item).__name__}")


def _normalize_event(event: RelayEvent) -> FormattedRecord:
    if not isinstance(event.content, str):
        raise TypeError(f"content must be text, got {type(event.content).__name__}")
    return FormattedRecord(
        display_date=timestamp_to_iso(event.created_at),
        title="",
        author=f"{event.pubkey[:8]}..." if event.pubkey else "",
        content=event.content,
        metadata={"kind": str(event.kind)} if event.kind is not None else None,
    )


def _normalize_entry(entry: FeedEntry) -> FormattedRecord:
    if entry.pub_date:
        display_date = date_string_to_iso(entry.pub_date)
    elif entry.iso_date:
        display_date = date_string_to_iso(entry.iso_date)
    else:
        display_date = UNKNOWN_DATE

    metadata = None
    if entry.categories:
        metadata = {"categories": ", ".join(_category_text(c) for c in entry.categories)}

    return FormattedRecord(
        display_date=display_date,
        title=entry.title or "",
        author=_entry_author(entry),
        content=entry.content_snippet or entry.content or "",
        link=entry.link or "",
        metadata=metadata,
    )


def _entry_author(entry: FeedEntry) -> str:
    if entry.creator:
        return entry.creator
    for alternate in entry.alt_creators:
        if alternate:
            return alternate
    if entry.categories:
        nested = _nested_text(entry.categories[0])
        if nested:
            return nested
    return UNKNOWN_AUTHOR


def _nested_text(value: Any) -> Optional[str]:
    # xml2js style: <category domain="x">text</category> -> {"_": "text", "$": {...}}
    if isinstance(value, dict) and isinstance(value.get("_"), str):
        return value["_"]
    return None


def _category_text(category: Any) -> str:
    if isinstance(category, str):
        return category
    nested = _nested_text(category)
    if nested is not None:
        return nested
    return json.dumps(category, default=str)


# =============================================================================
# Rendering
# =============================================================================

def render(record: FormattedRecord) -> str:
    """Render one record as newline separated text."""
    header = f"[{record.display_date}]"
    if record.title:
        header = f"{header} {record.title}"

    lines = [header]
    if record.author:
        lines.append(f"Author: {record.author}")
    for key, value in (record.metadata or {}).items():
        if value:
            lines.append(f"{key[:1].upper()}{key[1:]}: {value}")
    if record.content:
        lines.append(record.content)
    if record.link:
        lines.append(record.link)
    return "\n".join(lines)


def render_batch(records: Iterable[FormattedRecord]) -> str:
    """Render records separated by a blank line."""
    return ITEM_SEPARATOR.join(render(r) for r in records)
