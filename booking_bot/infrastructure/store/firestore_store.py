from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any, Callable

import firebase_admin
from firebase_admin import credentials, firestore

from booking_bot.application.ports.session_store import SessionStorePort
from booking_bot.domain.entities.session import Session
from booking_bot.infrastructure.store.memory_store import DEFAULT_EXPIRATION_SECONDS

logger = logging.getLogger(__name__)


def build_firestore_client(credentials_path: str | None = None) -> Any:
    """
    Initialize the default Firebase app once and return a Firestore client.
    Without a credentials path the SDK falls back to application default credentials.
    """
    try:
        firebase_admin.get_app()
    except ValueError:
        # No default app yet.
        if credentials_path:
            logger.info("Loading Firebase credentials from %s", credentials_path)
            firebase_admin.initialize_app(credentials.Certificate(credentials_path))
        else:
            firebase_admin.initialize_app()
    return firestore.client()


class FirestoreSessionStore(SessionStorePort):
    def __init__(
        self,
        client: Any,
        collection: str = "sessions",
        expiration_seconds: float = DEFAULT_EXPIRATION_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._collection = client.collection(collection)
        self._expiration_seconds = expiration_seconds
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def get(self, user_id: str) -> Session | None:
        doc_ref = self._collection.document(user_id)
        snapshot = doc_ref.get()
        if not snapshot.exists:
            return None
        session = Session.from_document(snapshot.to_dict() or {})
        if session.is_expired(self._clock(), self._expiration_seconds):
            self._logger.info("Expired session discarded", extra={"user_id": user_id})
            doc_ref.delete()
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
        self._collection.document(user_id).set(session.to_document())
        return session

    def update(self, session: Session) -> Session:
        now = self._clock()
        updated = replace(session, updated_at=now, last_interaction_at=now)
        # Full overwrite so selections cleared by a reset disappear from the document.
        self._collection.document(session.user_id).set(updated.to_document())
        return updated

    def delete(self, user_id: str) -> None:
        self._collection.document(user_id).delete()
