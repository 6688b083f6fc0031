from __future__ import annotations

from dataclasses import replace

from booking_bot.application.exceptions import SessionStateError, UnknownStepError
from booking_bot.application.utils.date_parser import format_hour
from booking_bot.domain.entities.flow_step import (
    AwaitingStart,
    ChoosingCategory,
    ChoosingDate,
    ChoosingHour,
    ChoosingProfessional,
    ChoosingService,
    Confirming,
    FIRST_STEP,
    FlowStep,
    LAST_STEP,
    ServiceChoice,
)
from booking_bot.domain.entities.session import Session


def flow_step_from_session(session: Session) -> FlowStep:
    """
    Rebuild the typed flow step from a stored session.
    Raises UnknownStepError for steps outside 1-7 and SessionStateError when a
    selection required by the stored step is missing.
    """
    step = session.step
    if step == AwaitingStart.step:
        return AwaitingStart()
    if step == ChoosingCategory.step:
        return ChoosingCategory()
    if step < FIRST_STEP or step > LAST_STEP:
        raise UnknownStepError(step)

    category_id = _require(session, "category_id")
    if step == ChoosingService.step:
        return ChoosingService(category_id=category_id, category_name=session.category_name)

    service = ServiceChoice(
        id=_require(session, "service_id"),
        name=session.service_name,
        description=session.service_description,
        duration=session.service_duration,
        price=session.service_price,
    )
    if step == ChoosingDate.step:
        return ChoosingDate(category_id=category_id, category_name=session.category_name, service=service)

    date = _require(session, "date")
    if step == ChoosingHour.step:
        return ChoosingHour(
            category_id=category_id,
            category_name=session.category_name,
            service=service,
            date=date,
        )

    hour = _require(session, "hour")
    if step == ChoosingProfessional.step:
        return ChoosingProfessional(
            category_id=category_id,
            category_name=session.category_name,
            service=service,
            date=date,
            hour=hour,
        )

    return Confirming(
        category_id=category_id,
        category_name=session.category_name,
        service=service,
        date=date,
        hour=hour,
        professional_id=_require(session, "professional_id"),
        professional_name=_require(session, "professional_name"),
    )


def apply_flow_step(session: Session, flow_step: FlowStep) -> Session:
    """Write the step and its selections into the session; later selections are cleared."""
    category_id = category_name = None
    service: ServiceChoice | None = None
    date = hour = professional_id = professional_name = None

    if isinstance(flow_step, ChoosingService):
        category_id = flow_step.category_id
        category_name = flow_step.category_name
    if isinstance(flow_step, ChoosingDate):
        service = flow_step.service
    if isinstance(flow_step, ChoosingHour):
        date = flow_step.date
    if isinstance(flow_step, ChoosingProfessional):
        hour = flow_step.hour
    if isinstance(flow_step, Confirming):
        professional_id = flow_step.professional_id
        professional_name = flow_step.professional_name

    return replace(
        session,
        step=flow_step.step,
        category_id=category_id,
        category_name=category_name,
        service_id=service.id if service else None,
        service_name=service.name if service else None,
        service_description=service.description if service else None,
        service_duration=service.duration if service else None,
        service_price=service.price if service else None,
        date=date,
        hour=hour,
        hour_formatted=format_hour(hour) if hour is not None else None,
        professional_id=professional_id,
        professional_name=professional_name,
    )


def reset_session(session: Session) -> Session:
    """Return the session back at the start of the flow with no selections."""
    return apply_flow_step(session, AwaitingStart())


def _require(session: Session, field_name: str):
    value = getattr(session, field_name)
    if value is None:
        raise SessionStateError(f"Session at step {session.step} is missing {field_name}")
    return value
