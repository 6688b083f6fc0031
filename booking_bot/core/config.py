from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    WHATSAPP_ACCESS_TOKEN: str | None = None
    WHATSAPP_PHONE_NUMBER_ID: str | None = None
    WHATSAPP_VERIFY_TOKEN: str = ""
    WHATSAPP_APP_SECRET: str | None = None
    WHATSAPP_GRAPH_API_VERSION: str = "v20.0"
    WHATSAPP_API_BASE_URL: str = "https://graph.facebook.com"

    BOOKING_API_BASE_URL: str | None = None
    BOOKING_API_AUTH_TOKEN: str | None = None
    SALON_ID: int = 101539
    RESERVATION_SALON_ID: int = 101539

    BUSINESS_NAME: str = "Western Barber Shop"
    SCHEDULE_URL: str = ""
    INSTAGRAM_URL: str = ""

    SESSION_STORE: str = "memory"  # "memory", "json", "firestore"
    SESSION_DATA_DIR: str = "./data/sessions"
    SESSION_EXPIRATION_MINUTES: int = 30
    FIRESTORE_COLLECTION: str = "sessions"
    GOOGLE_APPLICATION_CREDENTIALS: str | None = None

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"


settings = Settings()
