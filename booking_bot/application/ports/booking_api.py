from __future__ import annotations

from abc import ABC, abstractmethod

from booking_bot.domain.entities.catalog import (
    AvailabilitySlot,
    Category,
    Professional,
    Reservation,
    ReservationRequest,
    Service,
)


class BookingApiPort(ABC):
    """Remote salon booking API. Every method raises BookingApiError on failure."""

    @abstractmethod
    def list_categories(self) -> list[Category]:
        raise NotImplementedError

    @abstractmethod
    def list_services(self, category_id: int) -> list[Service]:
        """List services bookable online for a category."""
        raise NotImplementedError

    @abstractmethod
    def get_available_hours(self, service_id: int, date: str) -> list[AvailabilitySlot]:
        """Available slots for a service on a YYYY-MM-DD date."""
        raise NotImplementedError

    @abstractmethod
    def get_professional(self, service_id: int, professional_id: int) -> Professional | None:
        """Professional info for a service. Returns None if the API lists nobody."""
        raise NotImplementedError

    @abstractmethod
    def create_reservation(self, request: ReservationRequest) -> list[Reservation]:
        raise NotImplementedError
