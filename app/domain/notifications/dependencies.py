"""FastAPI dependencies exposing the notification channels"""

import logging
from typing import Optional

from fastapi import BackgroundTasks, HTTPException, Request

from .channels import NotificationChannels
from .scheduler import NotificationScheduler

logger = logging.getLogger(__name__)


def get_channels(request: Request) -> NotificationChannels:
    channels = getattr(request.app.state, "channels", None)
    if channels is None:
        raise HTTPException(status_code=503, detail="Notification channels are not initialized")
    return channels


def get_notification_scheduler(request: Request, background_tasks: BackgroundTasks) -> Optional[NotificationScheduler]:
    """Scheduler for detached notification work, or None when channels are unavailable"""
    channels = getattr(request.app.state, "channels", None)
    if channels is None:
        logger.warning(f"⚠️ Notification channels not initialized, {request.url.path} will not notify")
        return None
    return NotificationScheduler(background_tasks, channels)
