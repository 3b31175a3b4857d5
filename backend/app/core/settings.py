import os

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


class Settings:
    def __init__(self):
        self.app_name = "TutorLink"
        self.api_version = "1.0.0"
        self.environment = os.getenv("ENVIRONMENT", "development")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.secret_key = os.getenv("SECRET_KEY", "CHANGE_ME")
        self.SECRET_KEY = self.secret_key
        self.access_token_expire_minutes = _env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 30)
        self.ACCESS_TOKEN_EXPIRE_MINUTES = self.access_token_expire_minutes
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./tutorlink.db")

        # Shared secret sent by the external cron in the X-Cron-Secret header
        self.cron_secret = os.getenv("CRON_SECRET", "")

        # Outbound transports; missing credentials switch them to log-only mode
        self.resend_api_key = os.getenv("RESEND_API_KEY", "")
        self.email_from = os.getenv("EMAIL_FROM", "TutorLink <no-reply@tutorlink.app>")
        self.whatsapp_token = os.getenv("WHATSAPP_TOKEN", "")
        self.whatsapp_phone_id = os.getenv("WHATSAPP_PHONE_ID", "")
        self.whatsapp_test_to = os.getenv("WHATSAPP_TEST_TO", "")
        self.transport_timeout_seconds = _env_int("TRANSPORT_TIMEOUT_SECONDS", 10)

        # Scheduling
        self.local_timezone = os.getenv("LOCAL_TZ", "UTC")
        self.meeting_base_url = os.getenv("MEETING_BASE_URL", "https://meet.jit.si")
        self.default_session_minutes = _env_int("DEFAULT_SESSION_MINUTES", 60)
        self.reservation_session_minutes = _env_int("RESERVATION_SESSION_MINUTES", 120)

        # Sweeps
        self.outbox_batch_size = _env_int("OUTBOX_BATCH_SIZE", 50)
        self.outbox_max_attempts = _env_int("OUTBOX_MAX_ATTEMPTS", 5)
        self.reminder_lead_minutes = _env_int("REMINDER_LEAD_MINUTES", 30)
        self.reminder_batch_size = _env_int("REMINDER_BATCH_SIZE", 200)


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
