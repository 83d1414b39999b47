"""Catalog repository - branches, appointment types and holidays"""

from datetime import date
from typing import Optional

from sqlalchemy import extract, or_
from sqlalchemy.orm import Session

from ...models import AppointmentType, Branch, Holiday


class CatalogRepository:
    """Repository for read-mostly reference data"""

    @staticmethod
    def get_branch(db: Session, branch_id: int) -> Optional[Branch]:
        return db.query(Branch).filter(Branch.id == branch_id).first()

    @staticmethod
    def get_active_branch(db: Session, branch_id: int) -> Optional[Branch]:
        return db.query(Branch).filter(Branch.id == branch_id, Branch.is_active.is_(True)).first()

    @staticmethod
    def list_active_branches(db: Session) -> list[Branch]:
        return db.query(Branch).filter(Branch.is_active.is_(True)).order_by(Branch.name).all()

    @staticmethod
    def get_appointment_type(db: Session, appointment_type_id: int) -> Optional[AppointmentType]:
        return db.query(AppointmentType).filter(AppointmentType.id == appointment_type_id).first()

    @staticmethod
    def list_active_appointment_types(db: Session) -> list[AppointmentType]:
        return (
            db.query(AppointmentType)
            .filter(AppointmentType.is_active.is_(True))
            .order_by(AppointmentType.name)
            .all()
        )

    @staticmethod
    def find_active_holiday(db: Session, day: date, branch_id: int) -> Optional[Holiday]:
        """First active holiday on `day` that applies to the branch (global or branch-specific)"""
        return (
            db.query(Holiday)
            .filter(
                Holiday.holiday_date == day,
                Holiday.is_active.is_(True),
                or_(Holiday.branch_id.is_(None), Holiday.branch_id == branch_id),
            )
            .order_by(Holiday.id)
            .first()
        )

    @staticmethod
    def list_holidays(db: Session, year: int, branch_id: Optional[int] = None) -> list[Holiday]:
        query = db.query(Holiday).filter(
            extract("year", Holiday.holiday_date) == year,
            Holiday.is_active.is_(True),
        )
        if branch_id is not None:
            query = query.filter(or_(Holiday.branch_id.is_(None), Holiday.branch_id == branch_id))
        return query.order_by(Holiday.holiday_date).all()

    @staticmethod
    def holiday_exists(db: Session, day: date, holiday_type: str, branch_id: Optional[int] = None) -> bool:
        """Active holiday of the same type on `day` for the same branch (or global)"""
        query = db.query(Holiday.id).filter(
            Holiday.holiday_date == day,
            Holiday.holiday_type == holiday_type,
            Holiday.is_active.is_(True),
        )
        if branch_id is None:
            query = query.filter(Holiday.branch_id.is_(None))
        else:
            query = query.filter(Holiday.branch_id == branch_id)
        return query.first() is not None

    @staticmethod
    def create_holiday(db: Session, **holiday_data) -> Holiday:
        holiday = Holiday(**holiday_data)
        db.add(holiday)
        db.commit()
        db.refresh(holiday)
        return holiday
