"""Deterministic output filenames for downloaded attachments."""

from __future__ import annotations

from datetime import datetime

KNOWN_EXTENSIONS = (".pdf", ".xml")

# Altinn delivers the e2b settlement file without an extension and with a
# display name starting with this token. Fragile: breaks if upstream renames it.
LEGACY_XML_PREFIX = "Et"

# Display names come from the remote system and must stay a single path segment.
_PATH_SEPARATORS = ("/", "\\")


def format_timestamp(created_at: datetime) -> str:
    """Render a creation time the way earlier downloads were named.

    Seconds are always present, a fractional part only when non-zero and
    then as milliseconds where that is exact (``09:48:31.597``). Any UTC
    offset is dropped; the remote system reports local time.
    """
    text = created_at.replace(tzinfo=None, microsecond=0).isoformat()
    if created_at.microsecond == 0:
        return text
    if created_at.microsecond % 1000 == 0:
        return f"{text}.{created_at.microsecond // 1000:03d}"
    return f"{text}.{created_at.microsecond:06d}"


def safe_display_name(display_name: str) -> str:
    for separator in _PATH_SEPARATORS:
        display_name = display_name.replace(separator, "_")
    return display_name


def attachment_filename(created_at: datetime, display_name: str) -> str:
    """Return ``<created_at>-<display_name>[.ext]`` for an attachment.

    The prefix is the ISO-8601 form of the message creation time, so files
    sort by creation order. Identical inputs always give the same name, and
    a rerun overwrites the earlier file instead of duplicating it. Path
    separators in the display name are replaced with ``_``.
    """
    name = safe_display_name(display_name)
    prefix = f"{format_timestamp(created_at)}-{name}"
    if name.endswith(KNOWN_EXTENSIONS):
        return prefix
    if name.startswith(LEGACY_XML_PREFIX):
        return prefix + ".xml"
    return prefix + ".pdf"
