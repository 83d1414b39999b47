"""Notification repository - ledger rows and recipients"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, Notification, User, UserAssignment


class NotificationRepository:
    @staticmethod
    def create(db: Session, notification: Notification) -> Notification:
        db.add(notification)
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def save(db: Session, notification: Notification) -> Notification:
        db.add(notification)
        db.commit()
        return notification

    @staticmethod
    def get_appointment_with_details(db: Session, appointment_id: int) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .options(
                joinedload(Appointment.client),
                joinedload(Appointment.branch),
                joinedload(Appointment.appointment_type),
            )
            .filter(Appointment.id == appointment_id)
            .first()
        )

    @staticmethod
    def get_assigned_active_users(db: Session, appointment_type_id: int) -> list[User]:
        """Active staff with an active assignment to the appointment type"""
        return (
            db.query(User)
            .join(UserAssignment, UserAssignment.user_id == User.id)
            .filter(
                UserAssignment.appointment_type_id == appointment_type_id,
                UserAssignment.is_active.is_(True),
                User.is_active.is_(True),
            )
            .order_by(User.id)
            .all()
        )

    @staticmethod
    def get_for_user(db: Session, notification_id: int, user_id: int) -> Optional[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )

    @staticmethod
    def list_for_user(db: Session, user_id: int, unread_only: bool = False, limit: int = 50) -> list[Notification]:
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

    @staticmethod
    def count_unread(db: Session, user_id: int) -> int:
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .count()
        )
