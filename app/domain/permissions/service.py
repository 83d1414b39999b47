"""Permission service - capability sets per (role, form)"""

import logging
from collections import defaultdict

from sqlalchemy.orm import Session

from ...models import RolFormPermission
from ...shared.clock import utcnow
from ...shared.results import ErrorKind, OperationResult
from .capabilities import Capability
from .repository import PermissionRepository

logger = logging.getLogger(__name__)


class PermissionService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = PermissionRepository()

    def get_user_capabilities(self, user_id: int) -> dict[str, Capability]:
        """Union of capabilities over the user's active roles, keyed by form code"""
        merged: dict[str, Capability] = defaultdict(lambda: Capability.NONE)
        for row in self.repo.list_user_permissions(self.db, user_id):
            if row.form is None or not row.form.is_active:
                continue
            merged[row.form.code] |= Capability(row.capabilities)
        return dict(merged)

    def has_capability(self, user_id: int, form_code: str, capability: Capability) -> bool:
        granted = self.get_user_capabilities(user_id).get(form_code, Capability.NONE)
        return capability in granted

    def get_rol_permissions(self, rol_id: int) -> OperationResult:
        if not self.repo.get_rol(self.db, rol_id):
            return OperationResult.failure("Role not found", ErrorKind.NOT_FOUND)
        return OperationResult.success(self.repo.list_rol_permissions(self.db, rol_id))

    def update_rol_form_permission(self, rol_id: int, form_id: int, capabilities: Capability) -> OperationResult:
        """Replace the capability set of a role on a form, creating the row if needed"""
        if rol_id <= 0 or form_id <= 0:
            return OperationResult.failure("RolId and FormId are required", ErrorKind.VALIDATION)
        if not self.repo.get_rol(self.db, rol_id):
            return OperationResult.failure("Role not found", ErrorKind.NOT_FOUND)
        if not self.repo.get_form(self.db, form_id):
            return OperationResult.failure("Form not found", ErrorKind.NOT_FOUND)

        permission = self.repo.get_permission(self.db, rol_id, form_id)
        if permission is None:
            permission = RolFormPermission(rol_id=rol_id, form_id=form_id)
        permission.capabilities = capabilities.value
        permission.updated_at = utcnow()
        permission = self.repo.save(self.db, permission)

        logger.info(f"🔐 Role {rol_id} on form {form_id} now has {capabilities.names()}")
        return OperationResult.success(permission)
