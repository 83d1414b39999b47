"""Appointment repository - Database operations for appointments"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, AppointmentStatus


def _with_details(query):
    return query.options(
        joinedload(Appointment.client),
        joinedload(Appointment.branch),
        joinedload(Appointment.appointment_type),
    )


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_by_id(db: Session, appointment_id: int) -> Optional[Appointment]:
        return _with_details(db.query(Appointment)).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def appointment_number_exists(db: Session, appointment_number: str) -> bool:
        return (
            db.query(Appointment.id).filter(Appointment.appointment_number == appointment_number).first()
            is not None
        )

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update_appointment(db: Session, appointment: Appointment, **updates) -> Appointment:
        """Apply exactly the given column updates and persist"""
        for key, value in updates.items():
            setattr(appointment, key, value)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def list_for_client(db: Session, client_id: int) -> list[Appointment]:
        return (
            _with_details(db.query(Appointment))
            .filter(Appointment.client_id == client_id, Appointment.is_active.is_(True))
            .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
            .all()
        )

    @staticmethod
    def list_for_date(db: Session, day: date, branch_id: Optional[int] = None) -> list[Appointment]:
        query = _with_details(db.query(Appointment)).filter(
            Appointment.appointment_date == day,
            Appointment.is_active.is_(True),
        )
        if branch_id is not None:
            query = query.filter(Appointment.branch_id == branch_id)
        return query.order_by(Appointment.appointment_time, Appointment.id).all()

    @staticmethod
    def list_reminder_candidates(db: Session, day: date) -> list[Appointment]:
        """Active, not yet finished appointments on `day`"""
        return (
            db.query(Appointment)
            .filter(
                Appointment.appointment_date == day,
                Appointment.is_active.is_(True),
                Appointment.status.in_([AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value]),
            )
            .order_by(Appointment.id)
            .all()
        )
