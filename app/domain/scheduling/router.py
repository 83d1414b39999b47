"""Appointment router - public booking and staff lifecycle endpoints"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Appointment, User
from ...shared.responses import raise_for_failure
from ..notifications.dependencies import get_notification_scheduler
from ..notifications.scheduler import NotificationScheduler
from ..permissions.capabilities import APPOINTMENTS_FORM, Capability
from ..permissions.dependencies import require_capability
from .schemas import (
    AppointmentResponse,
    CancelAppointmentRequest,
    CompleteAppointmentRequest,
    PublicCancelRequest,
    SimpleAppointmentRequest,
    SimpleAppointmentResponse,
    StatusUpdateRequest,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(
    db: Session = Depends(get_db),
    notifier: Optional[NotificationScheduler] = Depends(get_notification_scheduler),
) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db, notifier)


def _to_response(a: Appointment) -> AppointmentResponse:
    return AppointmentResponse(
        id=a.id,
        appointmentNumber=a.appointment_number,
        clientId=a.client_id,
        clientNumber=a.client.client_number if a.client else None,
        clientName=a.client.full_name if a.client else None,
        branchId=a.branch_id,
        branchName=a.branch.name if a.branch else None,
        appointmentTypeId=a.appointment_type_id,
        appointmentTypeName=a.appointment_type.name if a.appointment_type else None,
        appointmentDate=a.appointment_date,
        appointmentTime=a.appointment_time,
        status=a.status,
        notes=a.notes,
        cancellationReason=a.cancellation_reason,
        completedAt=a.completed_at,
        createdAt=a.created_at,
        updatedAt=a.updated_at,
    )


# ============================================================================
# PUBLIC ENDPOINTS
# ============================================================================


@router.post("/simple", response_model=SimpleAppointmentResponse)
async def schedule_simple_appointment(
    data: SimpleAppointmentRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book an appointment, registering the client on first visit"""
    result = service.schedule_simple_appointment(data)
    raise_for_failure(result)
    return result.data


@router.post("/public/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_public_appointment(
    appointment_id: int,
    data: PublicCancelRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Client self-service cancellation"""
    result = service.cancel_public_appointment(appointment_id, data.clientNumber, data.reason)
    raise_for_failure(result)
    return _to_response(result.data)


@router.get("/client/{client_number}", response_model=list[AppointmentResponse])
async def list_client_appointments(
    client_number: str,
    service: AppointmentService = Depends(get_appointment_service),
):
    result = service.list_client_appointments(client_number)
    raise_for_failure(result)
    return [_to_response(a) for a in result.data]


# ============================================================================
# STAFF ENDPOINTS
# ============================================================================


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments_for_date(
    day: date = Query(..., alias="date"),
    branch_id: Optional[int] = Query(None),
    _user: User = Depends(require_capability(APPOINTMENTS_FORM, Capability.VIEW)),
    service: AppointmentService = Depends(get_appointment_service),
):
    return [_to_response(a) for a in service.list_appointments_for_date(day, branch_id)]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    _user: User = Depends(require_capability(APPOINTMENTS_FORM, Capability.VIEW)),
    service: AppointmentService = Depends(get_appointment_service),
):
    result = service.get_appointment(appointment_id)
    raise_for_failure(result)
    return _to_response(result.data)


@router.put("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    data: CancelAppointmentRequest,
    current_user: User = Depends(require_capability(APPOINTMENTS_FORM, Capability.UPDATE)),
    service: AppointmentService = Depends(get_appointment_service),
):
    logger.info(f"📥 User {current_user.id} cancelling appointment {appointment_id}")
    result = service.cancel_appointment(appointment_id, data.reason)
    raise_for_failure(result)
    return _to_response(result.data)


@router.put("/{appointment_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
    appointment_id: int,
    data: CompleteAppointmentRequest,
    _user: User = Depends(require_capability(APPOINTMENTS_FORM, Capability.UPDATE)),
    service: AppointmentService = Depends(get_appointment_service),
):
    result = service.complete_appointment(appointment_id, data.notes)
    raise_for_failure(result)
    return _to_response(result.data)


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: int,
    data: StatusUpdateRequest,
    _user: User = Depends(require_capability(APPOINTMENTS_FORM, Capability.UPDATE)),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Confirm or start an appointment"""
    result = service.update_status(appointment_id, data.status)
    raise_for_failure(result)
    return _to_response(result.data)
