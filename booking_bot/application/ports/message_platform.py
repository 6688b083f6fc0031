from abc import ABC, abstractmethod
from typing import Sequence


class MessagePlatformPort(ABC):
    @abstractmethod
    def send_text(self, recipient_id: str, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def send_buttons(self, recipient_id: str, body: str, buttons: Sequence[tuple[str, str]]) -> None:
        """Send up to three reply buttons given as (id, title) pairs."""
        raise NotImplementedError

    @abstractmethod
    def send_list(
        self,
        recipient_id: str,
        body: str,
        button_label: str,
        rows: Sequence[tuple[str, str, str]],
        section_title: str | None = None,
    ) -> None:
        """Send a list picker whose rows are (id, title, description) triples."""
        raise NotImplementedError

    @abstractmethod
    def send_link_button(self, recipient_id: str, body: str, url: str, label: str) -> None:
        raise NotImplementedError
