"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import (
    validate_document_number,
    validate_document_type,
    validate_email,
    validate_landline,
    validate_mobile,
    validate_time_token,
)


class SimpleAppointmentRequest(BaseModel):
    """Public booking form: client identity plus the requested slot"""

    documentType: str
    documentNumber: str
    fullName: str = Field(..., min_length=3, max_length=200)
    phone: Optional[str] = None
    mobile: str
    email: Optional[str] = None
    address: Optional[str] = Field(None, max_length=500)
    branchId: int = Field(..., gt=0)
    appointmentTypeId: int = Field(..., gt=0)
    appointmentDate: date
    appointmentTime: str
    observations: Optional[str] = Field(None, max_length=1000)

    @field_validator("documentType")
    @classmethod
    def check_document_type(cls, v):
        return validate_document_type(v)

    @field_validator("documentNumber")
    @classmethod
    def check_document_number(cls, v):
        return validate_document_number(v)

    @field_validator("fullName", mode="before")
    @classmethod
    def strip_full_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("mobile")
    @classmethod
    def check_mobile(cls, v):
        return validate_mobile(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_landline(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("appointmentDate", mode="before")
    @classmethod
    def parse_appointment_date(cls, v):
        # Accept full ISO timestamps too; only the calendar day matters
        if isinstance(v, str) and "T" in v:
            try:
                return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
            except ValueError:
                raise ValueError("Appointment date is not a valid date") from None
        return v

    @field_validator("appointmentTime")
    @classmethod
    def check_time(cls, v):
        return validate_time_token(v)


class SimpleAppointmentResponse(BaseModel):
    clientNumber: str
    appointmentNumber: str
    message: str
    appointmentDate: date
    appointmentTime: Optional[str] = None
    branchName: str
    status: str
    isNewClient: bool


class CancelAppointmentRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class PublicCancelRequest(BaseModel):
    clientNumber: Optional[str] = None
    reason: Optional[str] = Field(None, max_length=500)


class CompleteAppointmentRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=1000)


class StatusUpdateRequest(BaseModel):
    status: Literal["CONFIRMED", "IN_PROGRESS"]


class AppointmentResponse(BaseModel):
    id: int
    appointmentNumber: str
    clientId: int
    clientNumber: Optional[str] = None
    clientName: Optional[str] = None
    branchId: int
    branchName: Optional[str] = None
    appointmentTypeId: int
    appointmentTypeName: Optional[str] = None
    appointmentDate: date
    appointmentTime: Optional[str] = None
    status: str
    notes: Optional[str] = None
    cancellationReason: Optional[str] = None
    completedAt: Optional[datetime] = None
    createdAt: datetime
    updatedAt: Optional[datetime] = None
