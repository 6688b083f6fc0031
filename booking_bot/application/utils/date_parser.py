from __future__ import annotations

import re

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_iso_date(text: str | None) -> str | None:
    """Return the date string when it has the YYYY-MM-DD shape, else None."""
    candidate = (text or "").strip()
    if ISO_DATE_PATTERN.match(candidate):
        return candidate
    return None


def format_hour(schedule: int) -> str:
    """Format minutes since midnight as HH:MM (780 -> "13:00")."""
    hours, minutes = divmod(schedule, 60)
    return f"{hours:02d}:{minutes:02d}"
