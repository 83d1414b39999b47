"""FastAPI dependencies guarding staff endpoints"""

import logging

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .capabilities import Capability
from .service import PermissionService

logger = logging.getLogger(__name__)


def require_capability(form_code: str, capability: Capability):
    """Build a dependency that returns the current user if they hold `capability` on `form_code`"""

    async def dependency(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> User:
        if not PermissionService(db).has_capability(current_user.id, form_code, capability):
            logger.warning(f"🚫 User {current_user.id} lacks {capability.name} on {form_code}")
            raise HTTPException(status_code=403, detail=f"Missing {capability.name} permission on {form_code}")
        return current_user

    return dependency
