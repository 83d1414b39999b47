"""Appointment service - booking and lifecycle business logic"""

import logging
from datetime import date
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...models import Appointment, AppointmentStatus, Branch, Client
from ...shared.clock import utcnow
from ...shared.numbering import generate_appointment_number
from ...shared.results import ErrorKind, OperationResult
from ..catalogs.repository import CatalogRepository
from ..clients.service import ClientService
from ..notifications.payloads import DEFAULT_CANCELLATION_REASON
from ..notifications.scheduler import NotificationScheduler
from .calendar_rules import CalendarRules
from .repository import AppointmentRepository
from .schemas import SimpleAppointmentRequest, SimpleAppointmentResponse
from .status_machine import cancel_rejection, complete_rejection, transition_rejection

logger = logging.getLogger(__name__)

BRANCH_UNAVAILABLE = "The specified branch does not exist or is not active"
APPOINTMENT_TYPE_UNAVAILABLE = "The specified appointment type does not exist or is not active"
APPOINTMENT_NOT_FOUND = "Appointment not found"
MAX_NUMBER_ATTEMPTS = 5


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session, notifier: Optional[NotificationScheduler] = None):
        self.db = db
        self.repo = AppointmentRepository()
        self.catalogs = CatalogRepository()
        self.clients = ClientService(db)
        self.calendar = CalendarRules(db)
        self.notifier = notifier

    # ========================================================================
    # BOOKING
    # ========================================================================

    def schedule_simple_appointment(
        self, data: SimpleAppointmentRequest, today: Optional[date] = None
    ) -> OperationResult:
        """
        Book an appointment for a possibly new client.

        Checks run in a fixed order: branch, client resolution, calendar
        rules. A client registered during resolution is kept even when the
        date is then rejected.
        """
        try:
            branch = self.catalogs.get_active_branch(self.db, data.branchId)
            if not branch:
                logger.warning(f"⚠️ Booking rejected: branch {data.branchId} unavailable")
                return OperationResult.failure(BRANCH_UNAVAILABLE, ErrorKind.UNAVAILABLE)

            client, created = self.clients.resolve_client(
                document_type=data.documentType,
                document_number=data.documentNumber,
                full_name=data.fullName,
                email=data.email,
                phone=data.phone,
                mobile=data.mobile,
                address=data.address,
            )

            check = self.calendar.check_bookable(branch.id, data.appointmentDate, today=today)
            if not check.is_bookable:
                logger.info(f"📅 Booking rejected for {data.appointmentDate}: {check.reason}")
                return OperationResult.failure(check.reason, ErrorKind.BUSINESS_RULE)

            appointment_type = self.catalogs.get_appointment_type(self.db, data.appointmentTypeId)
            if not appointment_type or not appointment_type.is_active:
                return OperationResult.failure(APPOINTMENT_TYPE_UNAVAILABLE, ErrorKind.BUSINESS_RULE)

            appointment = self._write_appointment(client, branch, data)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error scheduling appointment: {e}")
            return OperationResult.failure(f"Error scheduling appointment: {e}", ErrorKind.INFRASTRUCTURE)

        self._notify(lambda n: n.appointment_created(appointment.id))

        message = (
            "Client created and appointment scheduled successfully"
            if created
            else "Appointment scheduled successfully"
        )
        return OperationResult.success(
            SimpleAppointmentResponse(
                clientNumber=client.client_number,
                appointmentNumber=appointment.appointment_number,
                message=message,
                appointmentDate=appointment.appointment_date,
                appointmentTime=appointment.appointment_time,
                branchName=branch.name,
                status=appointment.status,
                isNewClient=created,
            )
        )

    def _write_appointment(self, client: Client, branch: Branch, data: SimpleAppointmentRequest) -> Appointment:
        now = utcnow()
        appointment = self.repo.create_appointment(
            self.db,
            appointment_number=self._new_appointment_number(),
            client_id=client.id,
            branch_id=branch.id,
            appointment_type_id=data.appointmentTypeId,
            appointment_date=data.appointmentDate,
            appointment_time=data.appointmentTime,
            status=AppointmentStatus.PENDING.value,
            notes=data.observations,
            is_enabled=True,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        logger.info(
            f"✅ Appointment {appointment.appointment_number} booked for client {client.client_number} "
            f"at branch {branch.id} on {appointment.appointment_date} {appointment.appointment_time}"
        )
        return appointment

    def _new_appointment_number(self) -> str:
        for _ in range(MAX_NUMBER_ATTEMPTS):
            number = generate_appointment_number()
            if not self.repo.appointment_number_exists(self.db, number):
                return number
            logger.warning(f"⚠️ Appointment number collision on {number}, regenerating")
        raise RuntimeError("Could not generate a unique appointment number")

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def cancel_appointment(self, appointment_id: int, reason: Optional[str] = None) -> OperationResult:
        """Staff cancellation. Only status, reason and updated_at change."""
        try:
            appointment = self.repo.get_by_id(self.db, appointment_id)
            if not appointment:
                return OperationResult.failure(APPOINTMENT_NOT_FOUND, ErrorKind.NOT_FOUND)

            rejection = cancel_rejection(appointment.status)
            if rejection:
                return OperationResult.failure(rejection, ErrorKind.BUSINESS_RULE)

            appointment = self._apply_cancel(appointment, reason)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error cancelling appointment {appointment_id}: {e}")
            return OperationResult.failure(f"Error cancelling appointment: {e}", ErrorKind.INFRASTRUCTURE)

        self._notify(lambda n: n.appointment_cancelled(appointment_id, reason or DEFAULT_CANCELLATION_REASON))
        return OperationResult.success(appointment)

    def cancel_public_appointment(
        self, appointment_id: int, client_number: Optional[str], reason: Optional[str]
    ) -> OperationResult:
        """Client self-service cancellation, authorized by the client number"""
        if not client_number or not client_number.strip():
            return OperationResult.failure("Client number is required", ErrorKind.VALIDATION)
        if not reason or not reason.strip():
            return OperationResult.failure("Cancellation reason is required", ErrorKind.VALIDATION)
        reason = reason.strip()

        try:
            client = self.clients.get_by_client_number(client_number.strip())
            if not client:
                return OperationResult.failure("Client not found", ErrorKind.NOT_FOUND)

            appointment = self.repo.get_by_id(self.db, appointment_id)
            if not appointment:
                return OperationResult.failure(APPOINTMENT_NOT_FOUND, ErrorKind.NOT_FOUND)
            if appointment.client_id != client.id:
                logger.warning(f"🚫 Client {client.client_number} tried to cancel appointment {appointment_id}")
                return OperationResult.failure("Appointment does not belong to this client", ErrorKind.FORBIDDEN)

            rejection = cancel_rejection(appointment.status)
            if rejection:
                return OperationResult.failure(rejection, ErrorKind.BUSINESS_RULE)

            appointment = self._apply_cancel(appointment, reason)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error cancelling appointment {appointment_id}: {e}")
            return OperationResult.failure(f"Error cancelling appointment: {e}", ErrorKind.INFRASTRUCTURE)

        self._notify(lambda n: n.appointment_cancelled(appointment_id, reason))
        return OperationResult.success(appointment)

    def _apply_cancel(self, appointment: Appointment, reason: Optional[str]) -> Appointment:
        appointment = self.repo.update_appointment(
            self.db,
            appointment,
            status=AppointmentStatus.CANCELLED.value,
            cancellation_reason=reason,
            updated_at=utcnow(),
        )
        logger.info(f"🚫 Appointment {appointment.appointment_number} cancelled: {reason or '-'}")
        return appointment

    def complete_appointment(self, appointment_id: int, notes: Optional[str] = None) -> OperationResult:
        try:
            appointment = self.repo.get_by_id(self.db, appointment_id)
            if not appointment:
                return OperationResult.failure(APPOINTMENT_NOT_FOUND, ErrorKind.NOT_FOUND)

            rejection = complete_rejection(appointment.status)
            if rejection:
                return OperationResult.failure(rejection, ErrorKind.BUSINESS_RULE)

            now = utcnow()
            updates = {"status": AppointmentStatus.COMPLETED.value, "completed_at": now, "updated_at": now}
            if notes:
                updates["notes"] = notes
            appointment = self.repo.update_appointment(self.db, appointment, **updates)
            logger.info(f"🏁 Appointment {appointment.appointment_number} completed")
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error completing appointment {appointment_id}: {e}")
            return OperationResult.failure(f"Error completing appointment: {e}", ErrorKind.INFRASTRUCTURE)

        self._notify(lambda n: n.appointment_completed(appointment_id))
        return OperationResult.success(appointment)

    def update_status(self, appointment_id: int, target: str) -> OperationResult:
        """Staff transitions that are neither cancel nor complete (confirm, start)"""
        try:
            appointment = self.repo.get_by_id(self.db, appointment_id)
            if not appointment:
                return OperationResult.failure(APPOINTMENT_NOT_FOUND, ErrorKind.NOT_FOUND)

            rejection = transition_rejection(appointment.status, target)
            if rejection:
                return OperationResult.failure(rejection, ErrorKind.BUSINESS_RULE)

            previous = appointment.status
            appointment = self.repo.update_appointment(
                self.db, appointment, status=AppointmentStatus(target).value, updated_at=utcnow()
            )
            logger.info(f"🔄 Appointment {appointment.appointment_number}: {previous} -> {appointment.status}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating appointment {appointment_id}: {e}")
            return OperationResult.failure(f"Error updating appointment: {e}", ErrorKind.INFRASTRUCTURE)

        return OperationResult.success(appointment)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def get_appointment(self, appointment_id: int) -> OperationResult:
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            return OperationResult.failure(APPOINTMENT_NOT_FOUND, ErrorKind.NOT_FOUND)
        return OperationResult.success(appointment)

    def list_client_appointments(self, client_number: str) -> OperationResult:
        client = self.clients.get_by_client_number(client_number)
        if not client:
            return OperationResult.failure("Client not found", ErrorKind.NOT_FOUND)
        return OperationResult.success(self.repo.list_for_client(self.db, client.id))

    def list_appointments_for_date(self, day: date, branch_id: Optional[int] = None) -> list[Appointment]:
        return self.repo.list_for_date(self.db, day, branch_id)

    # ========================================================================
    # NOTIFICATIONS
    # ========================================================================

    def _notify(self, schedule: Callable[[NotificationScheduler], None]) -> None:
        """Queue detached notification work. Failures here never affect the operation."""
        if self.notifier is None:
            logger.debug("No notification scheduler configured, skipping dispatch")
            return
        try:
            schedule(self.notifier)
        except Exception as e:
            logger.error(f"❌ Could not schedule notifications: {e}")
