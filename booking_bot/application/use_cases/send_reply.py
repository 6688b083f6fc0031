from __future__ import annotations

import logging
from typing import Sequence

from booking_bot.application.ports.message_platform import MessagePlatformPort
from booking_bot.application.utils.date_parser import format_hour
from booking_bot.application.utils.message_rules import (
    CANCEL_OPTION,
    CATEGORY_PREFIX,
    CONFIRM_OPTION,
    HOUR_PREFIX,
    INSTAGRAM_OPTION,
    PROFESSIONAL_PREFIX,
    SCHEDULE_OPTION,
    SERVICE_PREFIX,
    build_option_id,
)
from booking_bot.domain.entities.catalog import AvailabilitySlot, Category, Professional, Service

DATE_PROMPT = "Por favor, informe a data desejada no formato YYYY-MM-DD (exemplo: 2025-05-01):"
DATE_FORMAT_CORRECTION = "Por favor, forneça a data no formato YYYY-MM-DD (exemplo: 2025-05-01):"
NO_AVAILABILITY = "Não há horários disponíveis para esta data. Por favor, escolha outra data:"
SUCCESS = "Horário reservado com sucesso. Obrigado."
FAILURE = "Não foi possível realizar o agendamento, por favor, agende por esse link:"
CANCELLED = "Agendamento cancelado. Obrigado pelo contato!"


class SendReplyUseCase:
    """Composes the bot's prompts and option ids on top of the messaging port."""

    def __init__(
        self,
        platform: MessagePlatformPort,
        business_name: str,
        schedule_url: str = "",
        instagram_url: str = "",
    ) -> None:
        self._platform = platform
        self._business_name = business_name
        self._schedule_url = schedule_url
        self._instagram_url = instagram_url
        self._logger = logging.getLogger(__name__)

    def send_welcome(self, user_id: str) -> None:
        self._platform.send_buttons(
            user_id,
            f"Olá, bem vindo a {self._business_name}!\nEm que podemos te ajudar?",
            [(SCHEDULE_OPTION, "Agendar"), (INSTAGRAM_OPTION, "Instagram")],
        )

    def send_instagram_link(self, user_id: str) -> None:
        self._platform.send_link_button(
            user_id,
            "Clique no botão abaixo para acessar nosso Instagram:",
            self._instagram_url,
            "Abrir Instagram",
        )

    def send_categories(self, user_id: str, categories: Sequence[Category]) -> None:
        rows = [(build_option_id(CATEGORY_PREFIX, c.id), c.name, "") for c in categories]
        self._platform.send_list(
            user_id,
            "Selecione uma categoria:",
            "Ver categorias",
            rows,
            section_title="Categorias disponíveis",
        )

    def send_services(self, user_id: str, services: Sequence[Service]) -> None:
        rows = [(build_option_id(SERVICE_PREFIX, s.id), s.name, s.description or "") for s in services]
        self._platform.send_list(
            user_id,
            "Selecione um serviço:",
            "Ver serviços",
            rows,
            section_title="Serviços disponíveis",
        )

    def send_date_prompt(self, user_id: str) -> None:
        # No native date picker; the user types the date.
        self._platform.send_text(user_id, DATE_PROMPT)

    def send_date_format_correction(self, user_id: str) -> None:
        self._platform.send_text(user_id, DATE_FORMAT_CORRECTION)

    def send_no_availability(self, user_id: str) -> None:
        self._platform.send_text(user_id, NO_AVAILABILITY)

    def send_hours(self, user_id: str, slots: Sequence[AvailabilitySlot]) -> None:
        rows = [(build_option_id(HOUR_PREFIX, slot.schedule), format_hour(slot.schedule), "") for slot in slots]
        self._platform.send_list(
            user_id,
            "Selecione um horário:",
            "Ver horários",
            rows,
            section_title="Horários disponíveis",
        )

    def send_professionals(self, user_id: str, professionals: Sequence[Professional]) -> None:
        body = "Selecione um profissional:"
        # WhatsApp allows at most three reply buttons.
        if len(professionals) <= 3:
            buttons = [(build_option_id(PROFESSIONAL_PREFIX, p.id), p.name) for p in professionals]
            self._platform.send_buttons(user_id, body, buttons)
            return
        rows = [(build_option_id(PROFESSIONAL_PREFIX, p.id), p.name, "") for p in professionals]
        self._platform.send_list(
            user_id,
            body,
            "Ver profissionais",
            rows,
            section_title="Profissionais disponíveis",
        )

    def send_confirmation(self, user_id: str, date: str, hour: str, service: str, professional: str) -> None:
        self._platform.send_buttons(
            user_id,
            f"Data {date} - {hour}\nServiço: {service}\nProfissional: {professional}",
            [(CONFIRM_OPTION, "Confirmar e Agendar"), (CANCEL_OPTION, "Cancelar")],
        )

    def send_success(self, user_id: str) -> None:
        self._platform.send_text(user_id, SUCCESS)

    def send_cancelled(self, user_id: str) -> None:
        self._platform.send_text(user_id, CANCELLED)

    def send_failure(self, user_id: str) -> None:
        """Generic failure notice followed by the manual booking link."""
        self._platform.send_text(user_id, FAILURE)
        if not self._schedule_url:
            self._logger.warning("SCHEDULE_URL not configured; failure message sent without link")
            return
        self._platform.send_link_button(user_id, "Agende por aqui:", self._schedule_url, "Agendar")
