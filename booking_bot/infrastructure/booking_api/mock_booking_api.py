from __future__ import annotations

import logging

from booking_bot.application.exceptions import BookingApiError
from booking_bot.application.ports.booking_api import BookingApiPort
from booking_bot.domain.entities.catalog import (
    AvailabilitySlot,
    Category,
    Professional,
    Reservation,
    ReservationRequest,
    Service,
)

_DEFAULT_CATEGORIES = [Category(id=1, name="Cabelo"), Category(id=2, name="Barba")]
_DEFAULT_SERVICES = {
    1: [Service(id=10, name="Corte", description="Corte masculino", duration=30, price=50.0)],
    2: [Service(id=20, name="Barba", description="Barba completa", duration=20, price=35.0)],
}
_DEFAULT_SLOTS = [
    AvailabilitySlot(schedule=540, professional_ids=(100, 101)),
    AvailabilitySlot(schedule=600, professional_ids=(100,)),
    AvailabilitySlot(schedule=780, professional_ids=(101,)),
]
_DEFAULT_PROFESSIONALS = {
    100: Professional(id=100, name="Carlos"),
    101: Professional(id=101, name="Rafael"),
}


class MockBookingApi(BookingApiPort):
    """
    In-memory stand-in for the salon API used in dev and tests.
    Slots are returned for every date unless `slots_by_date` names the date.
    """

    def __init__(
        self,
        categories: list[Category] | None = None,
        services: dict[int, list[Service]] | None = None,
        slots: list[AvailabilitySlot] | None = None,
        slots_by_date: dict[str, list[AvailabilitySlot]] | None = None,
        professionals: dict[int, Professional] | None = None,
        failing_professional_ids: set[int] | None = None,
        fail_reservations: bool = False,
    ) -> None:
        self.categories = list(_DEFAULT_CATEGORIES if categories is None else categories)
        self.services = dict(_DEFAULT_SERVICES if services is None else services)
        self.slots = list(_DEFAULT_SLOTS if slots is None else slots)
        self.slots_by_date = dict(slots_by_date or {})
        self.professionals = dict(_DEFAULT_PROFESSIONALS if professionals is None else professionals)
        self.failing_professional_ids = set(failing_professional_ids or ())
        self.fail_reservations = fail_reservations
        self.reservations: list[ReservationRequest] = []
        self.calls: list[str] = []
        self._logger = logging.getLogger(__name__)

    def list_categories(self) -> list[Category]:
        self.calls.append("list_categories")
        return list(self.categories)

    def list_services(self, category_id: int) -> list[Service]:
        self.calls.append("list_services")
        return list(self.services.get(category_id, []))

    def get_available_hours(self, service_id: int, date: str) -> list[AvailabilitySlot]:
        self.calls.append("get_available_hours")
        if date in self.slots_by_date:
            return list(self.slots_by_date[date])
        return list(self.slots)

    def get_professional(self, service_id: int, professional_id: int) -> Professional | None:
        self.calls.append("get_professional")
        if professional_id in self.failing_professional_ids:
            raise BookingApiError(f"Professional {professional_id} lookup failed", code=500)
        return self.professionals.get(professional_id)

    def create_reservation(self, request: ReservationRequest) -> list[Reservation]:
        self.calls.append("create_reservation")
        if self.fail_reservations:
            raise BookingApiError("Reservation rejected", code=400)
        self.reservations.append(request)
        reservation = Reservation(
            id=len(self.reservations),
            reservation=request.to_payload()["agendamentos"][0],
        )
        self._logger.info(
            "Mock reservation created",
            extra={"reason": f"reservation_id={reservation.id} date={request.date} hour={request.hour}"},
        )
        return [reservation]
