from __future__ import annotations

import json
import logging
import re
import threading
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable

from booking_bot.application.ports.session_store import SessionStorePort
from booking_bot.domain.entities.session import Session
from booking_bot.infrastructure.store.memory_store import DEFAULT_EXPIRATION_SECONDS


class JsonSessionStore(SessionStorePort):
    """One JSON document per user under data_dir, written atomically."""

    def __init__(
        self,
        data_dir: str = "./data/sessions",
        expiration_seconds: float = DEFAULT_EXPIRATION_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._expiration_seconds = expiration_seconds
        self._clock = clock
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # guards self._locks
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, user_id: str) -> threading.Lock:
        """Get or create a lock for a user_id."""
        with self._lock_lock:
            if user_id not in self._locks:
                self._locks[user_id] = threading.Lock()
            return self._locks[user_id]

    def _get_file_path(self, user_id: str) -> Path:
        safe_id = re.sub(r"[^A-Za-z0-9_.+-]", "_", user_id)
        return self._data_dir / f"{safe_id}.json"

    def _load_document(self, user_id: str) -> dict[str, Any] | None:
        file_path = self._get_file_path(user_id)
        if not file_path.exists():
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            # A corrupted file is treated as no session; the next create overwrites it.
            self._logger.warning("Unreadable session file", extra={"user_id": user_id, "error": str(e)})
            return None

    def _save_document(self, user_id: str, document: dict[str, Any]) -> None:
        """Save the document via temp file + rename."""
        file_path = self._get_file_path(user_id)
        temp_path = file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            temp_path.replace(file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise

    def get(self, user_id: str) -> Session | None:
        with self._get_lock(user_id):
            document = self._load_document(user_id)
            if document is None:
                return None
            session = Session.from_document(document)
            if session.is_expired(self._clock(), self._expiration_seconds):
                self._logger.info("Expired session discarded", extra={"user_id": user_id})
                self._get_file_path(user_id).unlink(missing_ok=True)
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
        with self._get_lock(user_id):
            self._save_document(user_id, session.to_document())
        return session

    def update(self, session: Session) -> Session:
        now = self._clock()
        updated = replace(session, updated_at=now, last_interaction_at=now)
        with self._get_lock(session.user_id):
            self._save_document(session.user_id, updated.to_document())
        return updated

    def delete(self, user_id: str) -> None:
        with self._get_lock(user_id):
            self._get_file_path(user_id).unlink(missing_ok=True)
