from abc import ABC, abstractmethod

from booking_bot.domain.entities.session import Session


class SessionStorePort(ABC):
    @abstractmethod
    def get(self, user_id: str) -> Session | None:
        """
        Return the user's session, or None if missing.
        An expired session is deleted and reported as missing.
        """
        raise NotImplementedError

    @abstractmethod
    def create(self, user_id: str) -> Session:
        """Create and persist a fresh session at step 1."""
        raise NotImplementedError

    @abstractmethod
    def update(self, session: Session) -> Session:
        """Persist the session, stamping updated_at and last_interaction_at."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, user_id: str) -> None:
        raise NotImplementedError

    def get_or_create(self, user_id: str) -> tuple[Session, bool]:
        """Returns (session, created)."""
        session = self.get(user_id)
        if session is not None:
            return session, False
        return self.create(user_id), True
