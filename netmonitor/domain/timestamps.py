from __future__ import annotations

import re
from datetime import datetime, timezone

# date-time production of RFC3339 section 5.6; a space separator is tolerated
_RFC3339_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})"
)


def parse_rfc3339(value: str) -> datetime | None:
    """Parse an RFC3339 timestamp into an aware UTC datetime.

    Returns None for anything unparseable, including timestamps without an
    explicit offset and other ISO 8601 forms (basic format, week dates,
    truncated times).
    """
    match = _RFC3339_RE.fullmatch(value) if value else None
    if match is None:
        return None
    fraction, offset = match.group(1) or "", match.group(2)
    if offset in ("Z", "z"):
        offset = "+00:00"
    # sub-microsecond digits are dropped
    normalised = f"{value[:10]}T{value[11:19]}{fraction[:7]}{offset}"
    try:
        parsed = datetime.fromisoformat(normalised)
    except ValueError:
        return None
    return parsed.astimezone(timezone.utc)


def format_query_time(moment: datetime) -> str:
    """Upstream query format: `YYYY-MM-DD HH:MM:SS` in UTC, no suffix."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S")
