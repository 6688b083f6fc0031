"""
Booking flow positions.

Each step carries only the selections that are guaranteed to exist once the
user has reached it; later steps extend earlier ones.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Union


@dataclass(frozen=True)
class ServiceChoice:
    id: int
    name: str | None = None
    description: str | None = None
    duration: int | None = None
    price: float | None = None


@dataclass(frozen=True)
class AwaitingStart:
    step: ClassVar[int] = 1


@dataclass(frozen=True)
class ChoosingCategory:
    step: ClassVar[int] = 2


@dataclass(frozen=True)
class ChoosingService:
    step: ClassVar[int] = 3

    category_id: int
    category_name: str | None


@dataclass(frozen=True)
class ChoosingDate(ChoosingService):
    step: ClassVar[int] = 4

    service: ServiceChoice


@dataclass(frozen=True)
class ChoosingHour(ChoosingDate):
    step: ClassVar[int] = 5

    date: str


@dataclass(frozen=True)
class ChoosingProfessional(ChoosingHour):
    step: ClassVar[int] = 6

    hour: int


@dataclass(frozen=True)
class Confirming(ChoosingProfessional):
    step: ClassVar[int] = 7

    professional_id: int
    professional_name: str


FlowStep = Union[
    AwaitingStart,
    ChoosingCategory,
    ChoosingService,
    ChoosingDate,
    ChoosingHour,
    ChoosingProfessional,
    Confirming,
]

FIRST_STEP = AwaitingStart.step
LAST_STEP = Confirming.step


def selections(flow_step: FlowStep) -> dict[str, Any]:
    """Selections made so far, as keyword arguments for the following step."""
    return {f.name: getattr(flow_step, f.name) for f in fields(flow_step)}
