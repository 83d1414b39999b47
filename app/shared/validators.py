"""Shared validation utilities"""

import re
from typing import Optional

from ..models import DocumentType

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

COLOMBIA_COUNTRY_CODE = "57"


def validate_document_type(value: Optional[str]) -> str:
    """
    Validate an identity document type code.

    Raises:
        ValueError: If the code is not one of CC, TI, CE, RC
    """
    if not value:
        raise ValueError("Document type is required")
    code = value.strip().upper()
    try:
        return DocumentType(code).value
    except ValueError:
        allowed = ", ".join(d.value for d in DocumentType)
        raise ValueError(f"Document type must be one of: {allowed}") from None


def validate_document_number(value: Optional[str]) -> str:
    if not value or not value.strip():
        raise ValueError("Document number is required")
    value = value.strip()
    if len(value) > 20:
        raise ValueError("Document number cannot exceed 20 characters")
    if not value.isalnum():
        raise ValueError("Document number can only contain letters and numbers")
    return value


def validate_mobile(value: Optional[str]) -> str:
    """Colombian mobile numbers: exactly 10 digits"""
    if not value or not value.strip():
        raise ValueError("Mobile number is required")
    value = value.strip()
    if not re.fullmatch(r"\d{10}", value):
        raise ValueError("Mobile number must have exactly 10 digits")
    return value


def validate_landline(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = value.strip()
    if len(value) > 20:
        raise ValueError("Phone number cannot exceed 20 characters")
    if not value.isdigit():
        raise ValueError("Phone number can only contain digits")
    return value


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address, or None when empty

    Raises:
        ValueError: If email format is invalid
    """
    if not email or not email.strip():
        return None

    email = email.strip().lower()
    if len(email) > 100:
        raise ValueError("Email cannot exceed 100 characters")
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")

    return email


def validate_time_token(value: Optional[str]) -> str:
    """Accept "H:mm" / "HH:mm" 24h times. The token is stored as given."""
    if not value or not value.strip():
        raise ValueError("Appointment time is required")
    value = value.strip()
    if not TIME_PATTERN.match(value):
        raise ValueError("Appointment time must use the HH:mm format")
    return value


def normalize_colombian_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to international format for WhatsApp delivery.

    "300 123 4567" -> "+573001234567". Ten-digit numbers starting with 3 are
    Colombian mobiles and get the 57 country code. Returns None when the
    number cannot be normalized.
    """
    if not phone:
        return None

    cleaned = re.sub(r"[\s\-()+]", "", phone)
    if not cleaned.isdigit():
        return None

    if len(cleaned) == 10 and cleaned.startswith("3"):
        cleaned = COLOMBIA_COUNTRY_CODE + cleaned

    # E.164 allows at most 15 digits
    if not 11 <= len(cleaned) <= 15:
        return None

    return f"+{cleaned}"
