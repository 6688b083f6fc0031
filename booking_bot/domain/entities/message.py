from dataclasses import dataclass


@dataclass(frozen=True)
class InboundMessage:
    id: str
    sender_id: str
    text: str
    option_id: str | None
    timestamp: int
