"""
Notification dispatcher - best-effort fan-out of appointment events.

Runs detached from the request that triggered it, so every entry point opens
its own database session. Each channel attempt is recorded in the
notifications ledger as PENDING before the call and SENT/FAILED afterwards.
A failing channel never prevents the other channels from being tried, and
nothing here raises to the caller.
"""

import logging
from typing import Awaitable, Callable, Optional

from sqlalchemy.orm import Session

from ... import config
from ...database import SessionLocal
from ...models import Appointment, Client, Notification, NotificationStatus, NotificationType
from ...shared.validators import normalize_colombian_phone
from . import payloads
from .channels import NotificationChannels
from .repository import NotificationRepository

logger = logging.getLogger(__name__)

EMAIL_FAILED = "Could not send the email"
WHATSAPP_FAILED = "Could not send the WhatsApp message"


class NotificationDispatcher:
    def __init__(self, channels: NotificationChannels, session_factory: Callable[[], Session] = SessionLocal):
        self.channels = channels
        self.session_factory = session_factory
        self.repo = NotificationRepository()

    # ========================================================================
    # EVENTS
    # ========================================================================

    async def send_appointment_confirmation(self, appointment_id: int) -> dict:
        """Email + WhatsApp to the client, in-app messages to assigned staff"""
        results: dict = {}
        db = self.session_factory()
        try:
            appointment, client = self._load(db, appointment_id, "confirmation")
            if appointment is None:
                return results

            logger.info(f"📧 Sending confirmation notifications for appointment {appointment.appointment_number}")
            message = payloads.confirmation_message(appointment)
            data = payloads.confirmation_data(appointment, client, appointment.branch, appointment.appointment_type)

            if config.email_notifications_enabled() and client.email:
                results["email"] = await self._deliver(
                    db,
                    appointment,
                    client,
                    NotificationType.EMAIL,
                    payloads.CONFIRMATION_TITLE,
                    message,
                    lambda: self.channels.gmail.send_appointment_confirmation(client.email, data),
                )

            phone = self._whatsapp_recipient(client)
            if phone:
                results["whatsapp"] = await self._deliver(
                    db,
                    appointment,
                    client,
                    NotificationType.WHATSAPP,
                    payloads.CONFIRMATION_TITLE,
                    message,
                    lambda: self.channels.whatsapp.send_appointment_confirmation(phone, data),
                )

            results["in_app"] = self._notify_assigned_staff(db, appointment, client)
        except Exception as e:
            logger.error(f"❌ Confirmation dispatch failed for appointment {appointment_id}: {e}")
        finally:
            db.close()
        return results

    async def send_appointment_reminder(self, appointment_id: int) -> dict:
        results: dict = {}
        db = self.session_factory()
        try:
            appointment, client = self._load(db, appointment_id, "reminder")
            if appointment is None:
                return results

            message = payloads.reminder_message(appointment)
            data = payloads.reminder_data(appointment, client, appointment.branch)

            if config.email_notifications_enabled() and client.email:
                results["email"] = await self._deliver(
                    db,
                    appointment,
                    client,
                    NotificationType.EMAIL,
                    payloads.REMINDER_TITLE,
                    message,
                    lambda: self.channels.gmail.send_appointment_reminder(client.email, data),
                )

            phone = self._whatsapp_recipient(client)
            if phone:
                results["whatsapp"] = await self._deliver(
                    db,
                    appointment,
                    client,
                    NotificationType.WHATSAPP,
                    payloads.REMINDER_TITLE,
                    message,
                    lambda: self.channels.whatsapp.send_appointment_reminder(phone, data),
                )
        except Exception as e:
            logger.error(f"❌ Reminder dispatch failed for appointment {appointment_id}: {e}")
        finally:
            db.close()
        return results

    async def send_appointment_cancellation(self, appointment_id: int, reason: Optional[str] = None) -> dict:
        results: dict = {}
        reason = reason or payloads.DEFAULT_CANCELLATION_REASON
        db = self.session_factory()
        try:
            appointment, client = self._load(db, appointment_id, "cancellation")
            if appointment is None:
                return results

            message = payloads.cancellation_message(appointment, reason)
            data = payloads.cancellation_data(appointment, client, appointment.branch, reason)

            if config.email_notifications_enabled() and client.email:
                results["email"] = await self._deliver(
                    db,
                    appointment,
                    client,
                    NotificationType.EMAIL,
                    payloads.CANCELLATION_TITLE,
                    message,
                    lambda: self.channels.gmail.send_appointment_cancellation(client.email, data),
                )

            phone = self._whatsapp_recipient(client)
            if phone:
                results["whatsapp"] = await self._deliver(
                    db,
                    appointment,
                    client,
                    NotificationType.WHATSAPP,
                    payloads.CANCELLATION_TITLE,
                    message,
                    lambda: self.channels.whatsapp.send_appointment_cancellation(phone, data),
                )
        except Exception as e:
            logger.error(f"❌ Cancellation dispatch failed for appointment {appointment_id}: {e}")
        finally:
            db.close()
        return results

    async def send_appointment_completed(self, appointment_id: int) -> dict:
        """Thank-you message, WhatsApp only"""
        results: dict = {}
        db = self.session_factory()
        try:
            appointment, client = self._load(db, appointment_id, "completed")
            if appointment is None:
                return results

            phone = self._whatsapp_recipient(client)
            if phone:
                data = payloads.completed_data(appointment, client, appointment.branch, appointment.appointment_type)
                results["whatsapp"] = await self._deliver(
                    db,
                    appointment,
                    client,
                    NotificationType.WHATSAPP,
                    payloads.COMPLETED_TITLE,
                    payloads.completed_message(appointment),
                    lambda: self.channels.whatsapp.send_appointment_completed(phone, data),
                )
        except Exception as e:
            logger.error(f"❌ Completed dispatch failed for appointment {appointment_id}: {e}")
        finally:
            db.close()
        return results

    async def push_appointment_created(self, appointment_id: int) -> int:
        """Real-time push to staff assigned to the appointment type. Returns pushes sent."""
        if not config.realtime_notifications_enabled():
            logger.debug("Real-time notifications disabled")
            return 0

        pushed = 0
        db = self.session_factory()
        try:
            appointment = self.repo.get_appointment_with_details(db, appointment_id)
            if appointment is None:
                logger.warning(f"⚠️ Appointment {appointment_id} not found for real-time push")
                return 0

            event = payloads.appointment_created_event(appointment)
            for user in self.repo.get_assigned_active_users(db, appointment.appointment_type_id):
                try:
                    if await self.channels.realtime.publish_to_user(user.id, "appointment_created", event):
                        pushed += 1
                except Exception as e:
                    logger.error(f"❌ Real-time push to user {user.id} failed: {e}")
        except Exception as e:
            logger.error(f"❌ Real-time push failed for appointment {appointment_id}: {e}")
        finally:
            db.close()

        if pushed:
            logger.info(f"📢 Pushed appointment {appointment_id} to {pushed} staff user(s)")
        return pushed

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _load(self, db: Session, appointment_id: int, event: str) -> tuple[Optional[Appointment], Optional[Client]]:
        appointment = self.repo.get_appointment_with_details(db, appointment_id)
        if appointment is None:
            logger.warning(f"⚠️ Appointment {appointment_id} not found for {event} notification")
            return None, None
        if appointment.client is None:
            logger.warning(f"⚠️ Client {appointment.client_id} not found for appointment {appointment_id}")
            return None, None
        return appointment, appointment.client

    @staticmethod
    def _whatsapp_recipient(client: Client) -> Optional[str]:
        if not config.whatsapp_notifications_enabled():
            return None
        phone = normalize_colombian_phone(client.mobile or client.phone)
        if not phone:
            logger.warning(f"⚠️ No valid phone number for client {client.id}, skipping WhatsApp")
        return phone

    async def _deliver(
        self,
        db: Session,
        appointment: Appointment,
        client: Client,
        channel: NotificationType,
        title: str,
        message: str,
        send: Callable[[], Awaitable[bool]],
    ) -> bool:
        """One ledger-tracked delivery attempt. Never raises."""
        failure_message = EMAIL_FAILED if channel == NotificationType.EMAIL else WHATSAPP_FAILED
        try:
            record = self.repo.create(
                db,
                Notification.create(
                    type=channel,
                    title=title,
                    message=message,
                    client_id=client.id,
                    appointment_id=appointment.id,
                ),
            )
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Could not record {channel.value} notification for appointment {appointment.id}: {e}")
            return False

        try:
            if await send():
                record.mark_as_sent()
                logger.info(f"✅ {channel.value} notification {record.id} sent for appointment {appointment.id}")
            else:
                record.mark_as_failed(failure_message)
                logger.warning(f"⚠️ {channel.value} notification {record.id} failed for appointment {appointment.id}")
        except Exception as e:
            record.mark_as_failed(str(e) or e.__class__.__name__)
            logger.error(f"❌ {channel.value} notification {record.id} raised: {e}")
        finally:
            try:
                self.repo.save(db, record)
            except Exception as e:
                db.rollback()
                logger.error(f"❌ Could not update notification {record.id}: {e}")

        return record.status == NotificationStatus.SENT

    def _notify_assigned_staff(self, db: Session, appointment: Appointment, client: Client) -> int:
        try:
            users = self.repo.get_assigned_active_users(db, appointment.appointment_type_id)
            message = payloads.staff_new_appointment_message(appointment, client)
            for user in users:
                notification = Notification.create(
                    type=NotificationType.IN_APP,
                    title=payloads.STAFF_NEW_APPOINTMENT_TITLE,
                    message=message,
                    user_id=user.id,
                    appointment_id=appointment.id,
                )
                notification.mark_as_sent()
                db.add(notification)
            db.commit()
            if users:
                logger.info(f"🔔 Created {len(users)} in-app notification(s) for appointment {appointment.id}")
            return len(users)
        except Exception as e:
            db.rollback()
            logger.error(f"❌ In-app notifications failed for appointment {appointment.id}: {e}")
            return 0
