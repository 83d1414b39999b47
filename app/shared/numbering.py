"""Human-readable business numbers: PREFIX-YYYYMMDD-XXXXXXXX"""

import uuid

from .clock import utc_today

APPOINTMENT_PREFIX = "APT"
CLIENT_PREFIX = "CLI"


def generate_number(prefix: str) -> str:
    """Generate a number from the UTC date and the first 8 hex chars of a uuid4"""
    suffix = uuid.uuid4().hex[:8].upper()
    return f"{prefix}-{utc_today():%Y%m%d}-{suffix}"


def generate_appointment_number() -> str:
    return generate_number(APPOINTMENT_PREFIX)


def generate_client_number() -> str:
    return generate_number(CLIENT_PREFIX)

