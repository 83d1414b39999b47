"""Permission router - role/form capability management"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import RolFormPermission, User
from ...shared.responses import raise_for_failure
from .capabilities import PERMISSIONS_FORM, Capability
from .dependencies import require_capability
from .schemas import CapabilityUpdate, FormPermissionResponse, UserPermissionsResponse
from .service import PermissionService

router = APIRouter(prefix="/permissions", tags=["Permissions"])


def get_permission_service(db: Session = Depends(get_db)) -> PermissionService:
    """Dependency injection for PermissionService"""
    return PermissionService(db)


def _to_response(row: RolFormPermission) -> FormPermissionResponse:
    granted = Capability(row.capabilities)
    return FormPermissionResponse(
        rolId=row.rol_id,
        formId=row.form_id,
        formCode=row.form.code if row.form else None,
        capabilities=granted.names(),
        canView=Capability.VIEW in granted,
        canInsert=Capability.INSERT in granted,
        canUpdate=Capability.UPDATE in granted,
        canDelete=Capability.DELETE in granted,
    )


@router.get("/me", response_model=UserPermissionsResponse)
async def get_my_permissions(
    current_user: User = Depends(get_current_user),
    service: PermissionService = Depends(get_permission_service),
):
    """Capabilities of the current user on every form"""
    capabilities = service.get_user_capabilities(current_user.id)
    return UserPermissionsResponse(
        userId=current_user.id,
        forms={code: granted.names() for code, granted in capabilities.items()},
    )


@router.get("/roles/{rol_id}", response_model=list[FormPermissionResponse])
async def get_rol_permissions(
    rol_id: int,
    _user: User = Depends(require_capability(PERMISSIONS_FORM, Capability.VIEW)),
    service: PermissionService = Depends(get_permission_service),
):
    result = service.get_rol_permissions(rol_id)
    raise_for_failure(result)
    return [_to_response(row) for row in result.data]


@router.put("/roles/{rol_id}/forms/{form_id}", response_model=FormPermissionResponse)
async def update_rol_form_permission(
    rol_id: int,
    form_id: int,
    data: CapabilityUpdate,
    _user: User = Depends(require_capability(PERMISSIONS_FORM, Capability.UPDATE)),
    service: PermissionService = Depends(get_permission_service),
):
    """Replace the capability set of a role on a form"""
    result = service.update_rol_form_permission(rol_id, form_id, Capability.from_names(data.capabilities))
    raise_for_failure(result)
    return _to_response(result.data)
