from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Category:
    id: int
    name: str


@dataclass(frozen=True)
class Service:
    id: int
    name: str
    description: str | None = None
    duration: int | None = None  # minutes
    price: float | None = None


@dataclass(frozen=True)
class AvailabilitySlot:
    schedule: int  # minutes since midnight
    professional_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class Professional:
    id: int
    name: str


@dataclass(frozen=True)
class ReservationRequest:
    professional_id: int
    service_id: int
    salon_id: int
    date: str  # YYYY-MM-DD
    hour: int  # minutes since midnight

    def to_payload(self) -> dict[str, Any]:
        return {
            "agendamentos": [
                {
                    "profissional_id": self.professional_id,
                    "servico_id": self.service_id,
                    "salao_id": self.salon_id,
                    "data": self.date,
                    "hora_ini": self.hour,
                    "profissional_indiferente": 0,
                    "obs": "",
                    "pagamento_reserva": 0,
                    "email": 1,
                    "email_agendamento": 1,
                }
            ]
        }


@dataclass(frozen=True)
class Reservation:
    id: int | None
    reservation: dict[str, Any] = field(default_factory=dict)
