from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable

from booking_bot.application.ports.session_store import SessionStorePort
from booking_bot.domain.entities.session import Session

DEFAULT_EXPIRATION_SECONDS = 30 * 60


class MemorySessionStore(SessionStorePort):
    def __init__(
        self,
        expiration_seconds: float = DEFAULT_EXPIRATION_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._sessions: dict[str, Session] = {}
        self._expiration_seconds = expiration_seconds
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def get(self, user_id: str) -> Session | None:
        session = self._sessions.get(user_id)
        if session is None:
            return None
        if session.is_expired(self._clock(), self._expiration_seconds):
            self._logger.info("Expired session discarded", extra={"user_id": user_id})
            self.delete(user_id)
            return None
        return session

    def create(self, user_id: str) -> Session:
        now = self._clock()
        session = Session(
            user_id=user_id,
            step=1,
            created_at=now,
            updated_at=now,
            last_interaction_at=now,
        )
        self._sessions[user_id] = session
        return session

    def update(self, session: Session) -> Session:
        now = self._clock()
        updated = replace(session, updated_at=now, last_interaction_at=now)
        self._sessions[session.user_id] = updated
        return updated

    def delete(self, user_id: str) -> None:
        self._sessions.pop(user_id, None)
