"""In-app inbox for staff users"""

from sqlalchemy.orm import Session

from ...models import Notification
from ...shared.results import ErrorKind, OperationResult
from .repository import NotificationRepository


class InboxService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()

    def list_notifications(self, user_id: int, unread_only: bool = False, limit: int = 50) -> list[Notification]:
        return self.repo.list_for_user(self.db, user_id, unread_only=unread_only, limit=limit)

    def unread_count(self, user_id: int) -> int:
        return self.repo.count_unread(self.db, user_id)

    def mark_as_read(self, notification_id: int, user_id: int) -> OperationResult:
        # Another user's notification is reported as missing
        notification = self.repo.get_for_user(self.db, notification_id, user_id)
        if not notification:
            return OperationResult.failure("Notification not found", ErrorKind.NOT_FOUND)
        notification.mark_as_read()
        self.repo.save(self.db, notification)
        self.db.refresh(notification)
        return OperationResult.success(notification)
