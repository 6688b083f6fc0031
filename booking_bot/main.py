import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from booking_bot.api.webhooks import router as webhooks_router
from booking_bot.core.config import settings

# LogRecord attributes appended to every line when a call passes them in `extra`.
CONTEXT_KEYS = ("user_id", "step", "option_id", "message_id", "reason", "error")


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = " ".join(
            f"{key}={getattr(record, key)}" for key in CONTEXT_KEYS if getattr(record, key, None) not in (None, "")
        )
        return f"{base} | {context}" if context else base


def configure_logging(level_name: str) -> None:
    stream = logging.StreamHandler()
    stream.setFormatter(ContextFormatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(stream)


configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info(
        "Booking bot starting",
        extra={"reason": f"env={settings.ENV} session_store={settings.SESSION_STORE}"},
    )
    yield


app = FastAPI(title="WhatsApp Booking Bot", version="1.0.0", lifespan=lifespan)
app.include_router(webhooks_router, tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
