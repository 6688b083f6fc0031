from __future__ import annotations

import re

SCHEDULE_OPTION = "schedule"
INSTAGRAM_OPTION = "instagram"
CONFIRM_OPTION = "confirm"
CANCEL_OPTION = "cancel"

CATEGORY_PREFIX = "category"
SERVICE_PREFIX = "service"
HOUR_PREFIX = "hour"
PROFESSIONAL_PREFIX = "professional"

SCHEDULE_KEYWORD = "agendar"


def is_schedule_request(option_id: str | None, text: str | None) -> bool:
    """
    A tap on the schedule option, or typed text mentioning the keyword.
    Taps carry the option title as text ("Confirmar e Agendar"), so only the id counts for them.
    """
    if option_id:
        return option_id == SCHEDULE_OPTION
    return SCHEDULE_KEYWORD in (text or "").lower()


def is_instagram_request(option_id: str | None) -> bool:
    return option_id == INSTAGRAM_OPTION


def build_option_id(prefix: str, value: int) -> str:
    return f"{prefix}_{value}"


def parse_option_id(option_id: str | None, prefix: str) -> int | None:
    """
    Extract the numeric identifier from an option id such as "category_5".
    Returns None when the id is missing or carries a different prefix.
    """
    if not option_id:
        return None
    match = re.fullmatch(rf"{re.escape(prefix)}_(\d+)", option_id.strip())
    if not match:
        return None
    return int(match.group(1))
