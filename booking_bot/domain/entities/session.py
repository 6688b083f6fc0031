from __future__ import annotations

from dataclasses import dataclass
from typing import Any


# Persisted document keys, in field order.
_DOCUMENT_KEYS: dict[str, str] = {
    "user_id": "phoneNumber",
    "step": "step",
    "category_id": "selectedCategoryId",
    "category_name": "selectedCategoryName",
    "service_id": "selectedServiceId",
    "service_name": "selectedService",
    "service_description": "selectedServiceDescription",
    "service_duration": "selectedServiceDuration",
    "service_price": "selectedServicePrice",
    "date": "selectedDate",
    "hour": "selectedHour",
    "hour_formatted": "selectedHourFormatted",
    "professional_id": "selectedProfessionalId",
    "professional_name": "selectedProfessional",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
    "last_interaction_at": "lastInteractionAt",
}


@dataclass(frozen=True)
class Session:
    user_id: str
    step: int = 1
    # category selection
    category_id: int | None = None
    category_name: str | None = None
    # service selection
    service_id: int | None = None
    service_name: str | None = None
    service_description: str | None = None
    service_duration: int | None = None
    service_price: float | None = None
    # date and hour selection
    date: str | None = None  # YYYY-MM-DD
    hour: int | None = None  # minutes since midnight
    hour_formatted: str | None = None  # HH:MM
    # professional selection
    professional_id: int | None = None
    professional_name: str | None = None
    # epoch seconds
    created_at: float | None = None
    updated_at: float | None = None
    last_interaction_at: float | None = None

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        if self.last_interaction_at is None:
            return True
        return now - self.last_interaction_at > ttl_seconds

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored document shape, omitting unset fields."""
        document: dict[str, Any] = {}
        for attr, key in _DOCUMENT_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                document[key] = value
        return document

    @staticmethod
    def from_document(document: dict[str, Any]) -> "Session":
        values = {attr: document.get(key) for attr, key in _DOCUMENT_KEYS.items()}
        values["user_id"] = str(values["user_id"] or "")
        step = values.get("step")
        try:
            values["step"] = int(step) if step is not None else 1
        except (TypeError, ValueError):
            # Left out of range so the state machine resets it.
            values["step"] = 0
        return Session(**values)
