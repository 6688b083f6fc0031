from __future__ import annotations

import logging
from typing import Callable

from booking_bot.application.exceptions import BookingApiError, FlowError, SessionStateError, UnknownStepError
from booking_bot.application.ports.booking_api import BookingApiPort
from booking_bot.application.ports.session_store import SessionStorePort
from booking_bot.application.use_cases.send_reply import SendReplyUseCase
from booking_bot.application.utils.date_parser import format_hour, parse_iso_date
from booking_bot.application.utils.message_rules import (
    CANCEL_OPTION,
    CATEGORY_PREFIX,
    CONFIRM_OPTION,
    HOUR_PREFIX,
    PROFESSIONAL_PREFIX,
    SERVICE_PREFIX,
    is_instagram_request,
    is_schedule_request,
    parse_option_id,
)
from booking_bot.application.utils.state_helpers import apply_flow_step, flow_step_from_session, reset_session
from booking_bot.domain.entities.catalog import Category, Professional, ReservationRequest, Service
from booking_bot.domain.entities.flow_step import (
    AwaitingStart,
    ChoosingCategory,
    ChoosingDate,
    ChoosingHour,
    ChoosingProfessional,
    ChoosingService,
    Confirming,
    FlowStep,
    ServiceChoice,
    selections,
)
from booking_bot.domain.entities.message import InboundMessage
from booking_bot.domain.entities.session import Session


class HandleIncomingMessageUseCase:
    """
    Booking conversation state machine.

    One call to `handle` per inbound WhatsApp message: it loads the user's
    session, sends the next prompt and persists the new step only after that
    prompt went out.
    """

    def __init__(
        self,
        sessions: SessionStorePort,
        booking_api: BookingApiPort,
        replies: SendReplyUseCase,
        reservation_salon_id: int,
    ) -> None:
        self._sessions = sessions
        self._booking_api = booking_api
        self._replies = replies
        self._reservation_salon_id = reservation_salon_id
        self._logger = logging.getLogger(__name__)
        self._handlers: dict[type, Callable[..., None]] = {
            AwaitingStart: self._handle_start,
            ChoosingCategory: self._handle_category,
            ChoosingService: self._handle_service,
            ChoosingDate: self._handle_date,
            ChoosingHour: self._handle_hour,
            ChoosingProfessional: self._handle_professional,
            Confirming: self._handle_confirmation,
        }

    def handle(self, message: InboundMessage) -> None:
        user_id = message.sender_id
        step: int | None = None
        try:
            session, created = self._sessions.get_or_create(user_id)
            step = session.step
            self._logger.info(
                "Message received",
                extra={"user_id": user_id, "step": step, "message_id": message.id, "option_id": message.option_id},
            )
            if created:
                self._logger.info("Session created", extra={"user_id": user_id, "message_id": message.id})
                self._replies.send_welcome(user_id)
                return
            self._dispatch(session, message)
        except Exception as e:
            self._logger.exception(
                "Error handling message",
                extra={"user_id": user_id, "step": step, "message_id": message.id, "error": str(e)},
            )
            self._send_failure(user_id)

    def resend_current_step(self, session: Session) -> None:
        """Send the current step's prompt again. Never writes the session."""
        self._send_step_prompt(session.user_id, flow_step_from_session(session))

    def _dispatch(self, session: Session, message: InboundMessage) -> None:
        user_id = session.user_id

        if is_schedule_request(message.option_id, message.text):
            self._start_schedule(session)
            return

        if is_instagram_request(message.option_id):
            self._replies.send_instagram_link(user_id)
            return

        try:
            flow_step = flow_step_from_session(session)
        except UnknownStepError as e:
            self._logger.warning("Unknown step, resetting session", extra={"user_id": user_id, "step": e.step})
            self._replies.send_welcome(user_id)
            self._sessions.update(reset_session(session))
            return

        # List-based steps are answered by tapping an option; typed text re-prompts.
        # The date step is the only one answered with free text.
        if not message.option_id and flow_step.step not in (AwaitingStart.step, ChoosingDate.step):
            self._logger.info(
                "Free text outside date step, resending prompt",
                extra={"user_id": user_id, "step": flow_step.step},
            )
            self._send_step_prompt(user_id, flow_step)
            return

        self._handlers[type(flow_step)](session, flow_step, message)

    def _start_schedule(self, session: Session) -> None:
        categories = self._fetch_categories()
        self._replies.send_categories(session.user_id, categories)
        self._advance(session, ChoosingCategory())

    def _handle_start(self, session: Session, flow_step: AwaitingStart, message: InboundMessage) -> None:
        self._replies.send_welcome(session.user_id)

    def _handle_category(self, session: Session, flow_step: ChoosingCategory, message: InboundMessage) -> None:
        category_id = parse_option_id(message.option_id, CATEGORY_PREFIX)
        if category_id is None:
            self._reprompt(session, flow_step, "invalid category option")
            return

        services = self._booking_api.list_services(category_id)
        if not services:
            self._reprompt(session, flow_step, f"no services for category {category_id}")
            return

        category_name = self._lookup_category_name(category_id)
        self._replies.send_services(session.user_id, services)
        self._advance(session, ChoosingService(category_id=category_id, category_name=category_name))

    def _handle_service(self, session: Session, flow_step: ChoosingService, message: InboundMessage) -> None:
        service_id = parse_option_id(message.option_id, SERVICE_PREFIX)
        if service_id is None:
            self._reprompt(session, flow_step, "invalid service option")
            return

        service = self._lookup_service(flow_step.category_id, service_id)
        self._replies.send_date_prompt(session.user_id)
        self._advance(session, ChoosingDate(**selections(flow_step), service=service))

    def _handle_date(self, session: Session, flow_step: ChoosingDate, message: InboundMessage) -> None:
        date = parse_iso_date(message.text)
        if date is None:
            self._replies.send_date_format_correction(session.user_id)
            return

        slots = self._booking_api.get_available_hours(flow_step.service.id, date)
        if not slots:
            self._logger.info(
                "No availability for date",
                extra={"user_id": session.user_id, "step": flow_step.step, "reason": date},
            )
            self._replies.send_no_availability(session.user_id)
            return

        self._replies.send_hours(session.user_id, slots)
        self._advance(session, ChoosingHour(**selections(flow_step), date=date))

    def _handle_hour(self, session: Session, flow_step: ChoosingHour, message: InboundMessage) -> None:
        hour = parse_option_id(message.option_id, HOUR_PREFIX)
        if hour is None:
            self._reprompt(session, flow_step, "invalid hour option")
            return

        professionals = self._professionals_for_hour(flow_step.service.id, flow_step.date, hour)
        self._replies.send_professionals(session.user_id, professionals)
        self._advance(session, ChoosingProfessional(**selections(flow_step), hour=hour))

    def _handle_professional(self, session: Session, flow_step: ChoosingProfessional, message: InboundMessage) -> None:
        professional_id = parse_option_id(message.option_id, PROFESSIONAL_PREFIX)
        if professional_id is None:
            self._reprompt(session, flow_step, "invalid professional option")
            return

        professional_name = self._lookup_professional_name(flow_step.service.id, professional_id)
        if flow_step.service.name is None or professional_name is None:
            raise FlowError("Missing information for confirmation")

        confirming = Confirming(
            **selections(flow_step),
            professional_id=professional_id,
            professional_name=professional_name,
        )
        self._send_confirmation(session.user_id, confirming)
        self._advance(session, confirming)

    def _handle_confirmation(self, session: Session, flow_step: Confirming, message: InboundMessage) -> None:
        user_id = session.user_id
        try:
            if message.option_id == CONFIRM_OPTION:
                self._submit_reservation(user_id, flow_step)
            elif message.option_id == CANCEL_OPTION:
                self._logger.info("Booking cancelled by user", extra={"user_id": user_id})
                self._replies.send_cancelled(user_id)
            else:
                self._replies.send_welcome(user_id)
        except Exception as e:
            self._logger.exception(
                "Error handling confirmation",
                extra={"user_id": user_id, "step": flow_step.step, "error": str(e)},
            )
            self._replies.send_failure(user_id)
        finally:
            # The flow always restarts after the confirmation step.
            self._sessions.update(reset_session(session))

    def _submit_reservation(self, user_id: str, confirming: Confirming) -> None:
        request = ReservationRequest(
            professional_id=confirming.professional_id,
            service_id=confirming.service.id,
            salon_id=self._reservation_salon_id,
            date=confirming.date,
            hour=confirming.hour,
        )
        try:
            bookings = self._booking_api.create_reservation(request)
        except BookingApiError as e:
            self._logger.warning(
                "Reservation failed",
                extra={"user_id": user_id, "step": confirming.step, "error": str(e)},
            )
            self._replies.send_failure(user_id)
            return

        self._logger.info(
            "Reservation confirmed",
            extra={"user_id": user_id, "reason": f"bookings={len(bookings)}"},
        )
        self._replies.send_success(user_id)

    def _send_step_prompt(self, user_id: str, flow_step: FlowStep) -> None:
        if isinstance(flow_step, Confirming):
            self._send_confirmation(user_id, flow_step)
        elif isinstance(flow_step, ChoosingProfessional):
            professionals = self._professionals_for_hour(flow_step.service.id, flow_step.date, flow_step.hour)
            self._replies.send_professionals(user_id, professionals)
        elif isinstance(flow_step, ChoosingHour):
            slots = self._booking_api.get_available_hours(flow_step.service.id, flow_step.date)
            if not slots:
                raise FlowError(f"No available hours left for {flow_step.date}")
            self._replies.send_hours(user_id, slots)
        elif isinstance(flow_step, ChoosingDate):
            self._replies.send_date_prompt(user_id)
        elif isinstance(flow_step, ChoosingService):
            services = self._booking_api.list_services(flow_step.category_id)
            if not services:
                raise FlowError(f"No services left for category {flow_step.category_id}")
            self._replies.send_services(user_id, services)
        elif isinstance(flow_step, ChoosingCategory):
            self._replies.send_categories(user_id, self._fetch_categories())
        else:
            self._replies.send_welcome(user_id)

    def _send_confirmation(self, user_id: str, confirming: Confirming) -> None:
        if confirming.service.name is None:
            raise SessionStateError("Confirmation step without a service name")
        self._replies.send_confirmation(
            user_id,
            confirming.date,
            format_hour(confirming.hour),
            confirming.service.name,
            confirming.professional_name,
        )

    def _reprompt(self, session: Session, flow_step: FlowStep, reason: str) -> None:
        self._logger.info(
            "Re-prompting current step",
            extra={"user_id": session.user_id, "step": flow_step.step, "reason": reason},
        )
        self._send_step_prompt(session.user_id, flow_step)

    def _advance(self, session: Session, flow_step: FlowStep) -> None:
        self._sessions.update(apply_flow_step(session, flow_step))
        self._logger.info("Step advanced", extra={"user_id": session.user_id, "step": flow_step.step})

    def _fetch_categories(self) -> list[Category]:
        categories = self._booking_api.list_categories()
        if not categories:
            raise FlowError("Failed to fetch categories")
        return categories

    def _professionals_for_hour(self, service_id: int, date: str, hour: int) -> list[Professional]:
        slots = self._booking_api.get_available_hours(service_id, date)
        slot = next((s for s in slots if s.schedule == hour), None)
        if slot is None or not slot.professional_ids:
            raise FlowError(f"No professionals available at {format_hour(hour)} on {date}")

        professionals: list[Professional] = []
        for professional_id in slot.professional_ids:
            try:
                professional = self._booking_api.get_professional(service_id, professional_id)
            except BookingApiError as e:
                self._logger.warning(
                    "Professional lookup failed",
                    extra={"reason": f"professional_id={professional_id}", "error": str(e)},
                )
                continue
            if professional is not None:
                professionals.append(professional)

        if not professionals:
            raise FlowError("No professionals found for the selected hour")
        return professionals

    def _lookup_category_name(self, category_id: int) -> str | None:
        try:
            categories = self._booking_api.list_categories()
        except BookingApiError as e:
            self._logger.warning("Category name lookup failed", extra={"error": str(e)})
            return None
        return next((c.name for c in categories if c.id == category_id), None)

    def _lookup_service(self, category_id: int, service_id: int) -> ServiceChoice:
        try:
            services = self._booking_api.list_services(category_id)
        except BookingApiError as e:
            self._logger.warning("Service details lookup failed", extra={"error": str(e)})
            return ServiceChoice(id=service_id)
        service: Service | None = next((s for s in services if s.id == service_id), None)
        if service is None:
            return ServiceChoice(id=service_id)
        return ServiceChoice(
            id=service.id,
            name=service.name,
            description=service.description,
            duration=service.duration,
            price=service.price,
        )

    def _lookup_professional_name(self, service_id: int, professional_id: int) -> str | None:
        try:
            professional = self._booking_api.get_professional(service_id, professional_id)
        except BookingApiError as e:
            self._logger.warning("Professional lookup failed", extra={"error": str(e)})
            return None
        return professional.name if professional else None

    def _send_failure(self, user_id: str) -> None:
        try:
            self._replies.send_failure(user_id)
        except Exception as e:
            self._logger.exception("Failed to deliver failure message", extra={"user_id": user_id, "error": str(e)})
