"""Schedules detached notification work after an appointment change"""

import logging
from typing import Callable

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from ...database import SessionLocal
from .channels import NotificationChannels
from .dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


class NotificationScheduler:
    """
    Queues dispatcher calls on FastAPI BackgroundTasks.

    Tasks run after the response is sent. Delivery is at-most-once: nothing
    is retried and a process restart drops queued work.
    """

    def __init__(
        self,
        background_tasks: BackgroundTasks,
        channels: NotificationChannels,
        session_factory: Callable[[], Session] = SessionLocal,
    ):
        self.background_tasks = background_tasks
        self.dispatcher = NotificationDispatcher(channels, session_factory)

    def appointment_created(self, appointment_id: int) -> None:
        self.background_tasks.add_task(self.dispatcher.push_appointment_created, appointment_id)
        self.background_tasks.add_task(self.dispatcher.send_appointment_confirmation, appointment_id)

    def appointment_cancelled(self, appointment_id: int, reason: str) -> None:
        self.background_tasks.add_task(self.dispatcher.send_appointment_cancellation, appointment_id, reason)

    def appointment_completed(self, appointment_id: int) -> None:
        self.background_tasks.add_task(self.dispatcher.send_appointment_completed, appointment_id)
