from functools import lru_cache
import logging

from booking_bot.application.ports.booking_api import BookingApiPort
from booking_bot.application.ports.message_platform import MessagePlatformPort
from booking_bot.application.ports.session_store import SessionStorePort
from booking_bot.application.use_cases.handle_incoming_message import HandleIncomingMessageUseCase
from booking_bot.application.use_cases.send_reply import SendReplyUseCase
from booking_bot.core.config import settings
from booking_bot.infrastructure.booking_api.mock_booking_api import MockBookingApi
from booking_bot.infrastructure.booking_api.salon_api_client import SalonApiClient
from booking_bot.infrastructure.store.firestore_store import FirestoreSessionStore, build_firestore_client
from booking_bot.infrastructure.store.json_store import JsonSessionStore
from booking_bot.infrastructure.store.memory_store import MemorySessionStore
from booking_bot.infrastructure.whatsapp.mock_platform import MockWhatsAppPlatform
from booking_bot.infrastructure.whatsapp.whatsapp_client import WhatsAppClient
from booking_bot.infrastructure.whatsapp.whatsapp_platform import WhatsAppPlatform


_session_store: SessionStorePort | None = None


def _is_dev() -> bool:
    return settings.ENV.lower() in {"dev", "local"}


def get_session_store() -> SessionStorePort:
    global _session_store
    if _session_store is None:
        expiration_seconds = settings.SESSION_EXPIRATION_MINUTES * 60
        provider = settings.SESSION_STORE.lower()
        if provider == "firestore":
            client = build_firestore_client(settings.GOOGLE_APPLICATION_CREDENTIALS)
            _session_store = FirestoreSessionStore(
                client=client,
                collection=settings.FIRESTORE_COLLECTION,
                expiration_seconds=expiration_seconds,
            )
        elif provider == "json":
            _session_store = JsonSessionStore(
                data_dir=settings.SESSION_DATA_DIR,
                expiration_seconds=expiration_seconds,
            )
        else:
            _session_store = MemorySessionStore(expiration_seconds=expiration_seconds)
    return _session_store


@lru_cache
def get_booking_api() -> BookingApiPort:
    logger = logging.getLogger(__name__)
    if not (settings.BOOKING_API_BASE_URL and settings.BOOKING_API_AUTH_TOKEN):
        if _is_dev():
            logger.info("Using MockBookingApi (booking API not configured, ENV=dev/local)")
            return MockBookingApi()
        raise ValueError("BOOKING_API_BASE_URL and BOOKING_API_AUTH_TOKEN are required.")
    return SalonApiClient(
        base_url=settings.BOOKING_API_BASE_URL,
        auth_token=settings.BOOKING_API_AUTH_TOKEN,
        salon_id=settings.SALON_ID,
    )


@lru_cache
def get_message_platform() -> MessagePlatformPort:
    logger = logging.getLogger(__name__)
    logger.info(
        "WHATSAPP_ACCESS_TOKEN present=%s len=%s",
        bool(settings.WHATSAPP_ACCESS_TOKEN),
        len(settings.WHATSAPP_ACCESS_TOKEN or ""),
    )

    if not (settings.WHATSAPP_ACCESS_TOKEN and settings.WHATSAPP_PHONE_NUMBER_ID):
        if _is_dev():
            logger.info("Using MockWhatsAppPlatform (credentials missing, ENV=dev/local)")
            return MockWhatsAppPlatform()
        raise ValueError("WHATSAPP_ACCESS_TOKEN and WHATSAPP_PHONE_NUMBER_ID are required to send replies.")

    client = WhatsAppClient(
        access_token=settings.WHATSAPP_ACCESS_TOKEN,
        phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID,
        api_version=settings.WHATSAPP_GRAPH_API_VERSION,
        base_url=settings.WHATSAPP_API_BASE_URL,
    )
    return WhatsAppPlatform(client=client)


def get_handle_incoming_message_use_case() -> HandleIncomingMessageUseCase:
    replies = SendReplyUseCase(
        platform=get_message_platform(),
        business_name=settings.BUSINESS_NAME,
        schedule_url=settings.SCHEDULE_URL,
        instagram_url=settings.INSTAGRAM_URL,
    )
    return HandleIncomingMessageUseCase(
        sessions=get_session_store(),
        booking_api=get_booking_api(),
        replies=replies,
        reservation_salon_id=settings.RESERVATION_SALON_ID,
    )


def get_container() -> dict[str, object]:
    return {
        "use_case": get_handle_incoming_message_use_case(),
        "store": get_session_store(),
        "platform": get_message_platform(),
    }
