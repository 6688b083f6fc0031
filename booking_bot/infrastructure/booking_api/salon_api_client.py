from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

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
from booking_bot.infrastructure.booking_api.schemas import (
    ApiEnvelope,
    AvailableHoursResponse,
    CategoriesResponse,
    ProfessionalsResponse,
    ReservationResponse,
    ServicesResponse,
)

ResponseT = TypeVar("ResponseT", bound=ApiEnvelope)


class SalonApiClient(BookingApiPort):
    def __init__(
        self,
        base_url: str,
        auth_token: str,
        salon_id: int,
        client: httpx.Client | None = None,
    ) -> None:
        self._salon_id = salon_id
        self._client = client or httpx.Client(timeout=10.0)
        self._base_url = base_url.rstrip("/")
        self._headers = {"Content-Type": "application/json", "Authorization": auth_token}
        self._logger = logging.getLogger(__name__)

    def list_categories(self) -> list[Category]:
        response = self._request("GET", f"/salao/{self._salon_id}/categorias", CategoriesResponse)
        return [Category(id=c.id, name=c.categoria) for c in response.data.categories]

    def list_services(self, category_id: int) -> list[Service]:
        response = self._request(
            "GET",
            f"/salao/{self._salon_id}/categoria/{category_id}/servicos",
            ServicesResponse,
            params={"agendamento_online": 1, "status": 1},
        )
        return [
            Service(
                id=s.id,
                name=s.servico,
                description=s.descricao,
                duration=s.tempo,
                price=s.valor,
            )
            for s in response.data.salonServices
        ]

    def get_available_hours(self, service_id: int, date: str) -> list[AvailabilitySlot]:
        response = self._request(
            "GET",
            f"/salao/{self._salon_id}/servico/{service_id}/horarios",
            AvailableHoursResponse,
            params={"data": date},
        )
        return [
            AvailabilitySlot(schedule=h.schedule, professional_ids=tuple(h.professionals))
            for h in response.data.available
        ]

    def get_professional(self, service_id: int, professional_id: int) -> Professional | None:
        response = self._request(
            "GET",
            f"/salao/{self._salon_id}/servico/{service_id}/profissionais",
            ProfessionalsResponse,
            params={"profissional_id": professional_id},
        )
        if not response.data.professionals:
            return None
        first = response.data.professionals[0]
        return Professional(id=first.id, name=first.nome)

    def create_reservation(self, request: ReservationRequest) -> list[Reservation]:
        response = self._request(
            "POST",
            f"/salao/{self._salon_id}/reservas",
            ReservationResponse,
            json=request.to_payload(),
        )
        self._logger.info(
            "Reservation created",
            extra={"reason": f"service_id={request.service_id} professional_id={request.professional_id}"},
        )
        return [Reservation(id=b.get("id"), reservation=b) for b in response.data.bookings]

    def _request(
        self,
        method: str,
        path: str,
        response_model: type[ResponseT],
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> ResponseT:
        url = f"{self._base_url}{path}"
        try:
            resp = self._client.request(method, url, params=params, json=json, headers=self._headers)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as e:
            self._logger.error("Booking API request failed", extra={"reason": f"{method} {path}", "error": str(e)})
            raise BookingApiError(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            self._logger.error("Booking API returned invalid JSON", extra={"reason": f"{method} {path}", "error": str(e)})
            raise BookingApiError(f"{method} {path} returned invalid JSON") from e

        try:
            envelope = ApiEnvelope.model_validate(payload)
            if envelope.code != 200:
                self._logger.error(
                    "Booking API error code",
                    extra={"reason": f"{method} {path}", "error": f"code={envelope.code}"},
                )
                raise BookingApiError(f"{method} {path} answered code {envelope.code}", code=envelope.code)
            return response_model.model_validate(payload)
        except ValidationError as e:
            self._logger.error("Unexpected booking API payload", extra={"reason": f"{method} {path}", "error": str(e)})
            raise BookingApiError(f"{method} {path} returned an unexpected payload") from e
