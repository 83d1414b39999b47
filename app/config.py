import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./electrohuila.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))

# Gmail satellite (Node service that renders and sends appointment emails)
GMAIL_API_URL = os.getenv("GMAIL_API_URL", "http://localhost:4000")
GMAIL_API_TIMEOUT = float(os.getenv("GMAIL_API_TIMEOUT", "30"))

# WhatsApp satellite
WHATSAPP_API_URL = os.getenv("WHATSAPP_API_URL", "http://localhost:3000")
WHATSAPP_API_KEY = os.getenv("WHATSAPP_API_KEY")
WHATSAPP_API_TIMEOUT = float(os.getenv("WHATSAPP_API_TIMEOUT", "30"))

# Link sent in cancellation messages so the client can book again
RESCHEDULE_URL = os.getenv("RESCHEDULE_URL", "https://electrohuila.com/reagendar")

# Shown as the attending professional in confirmation messages
DEFAULT_PROFESSIONAL_NAME = os.getenv("DEFAULT_PROFESSIONAL_NAME", "Técnico ElectroHuila")

# Redis is used for real-time pub/sub pushes and the arq worker
REDIS_URL = os.getenv("REDIS_URL")

# Hours before the appointment a reminder is considered to be sent
REMINDER_HOURS_BEFORE = int(os.getenv("REMINDER_HOURS_BEFORE", "24"))


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Channel flags are read on every dispatch so operators can toggle a channel
# without restarting the process.
def email_notifications_enabled() -> bool:
    return _env_flag("EMAIL_NOTIFICATIONS_ENABLED", True)


def whatsapp_notifications_enabled() -> bool:
    return _env_flag("WHATSAPP_NOTIFICATIONS_ENABLED", False)


def realtime_notifications_enabled() -> bool:
    return _env_flag("REALTIME_NOTIFICATIONS_ENABLED", True)
