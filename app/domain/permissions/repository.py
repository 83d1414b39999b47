"""Permission repository - roles, forms and capability rows"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Form, Rol, RolFormPermission, UserRol


class PermissionRepository:
    @staticmethod
    def get_rol(db: Session, rol_id: int) -> Optional[Rol]:
        return db.query(Rol).filter(Rol.id == rol_id).first()

    @staticmethod
    def get_form(db: Session, form_id: int) -> Optional[Form]:
        return db.query(Form).filter(Form.id == form_id).first()

    @staticmethod
    def get_permission(db: Session, rol_id: int, form_id: int) -> Optional[RolFormPermission]:
        return (
            db.query(RolFormPermission)
            .filter(RolFormPermission.rol_id == rol_id, RolFormPermission.form_id == form_id)
            .first()
        )

    @staticmethod
    def list_rol_permissions(db: Session, rol_id: int) -> list[RolFormPermission]:
        return (
            db.query(RolFormPermission)
            .options(joinedload(RolFormPermission.form))
            .filter(RolFormPermission.rol_id == rol_id)
            .order_by(RolFormPermission.form_id)
            .all()
        )

    @staticmethod
    def list_user_permissions(db: Session, user_id: int) -> list[RolFormPermission]:
        """Permission rows of every active role the user belongs to"""
        return (
            db.query(RolFormPermission)
            .options(joinedload(RolFormPermission.form))
            .join(Rol, Rol.id == RolFormPermission.rol_id)
            .join(UserRol, UserRol.rol_id == Rol.id)
            .filter(UserRol.user_id == user_id, Rol.is_active.is_(True))
            .all()
        )

    @staticmethod
    def save(db: Session, permission: RolFormPermission) -> RolFormPermission:
        db.add(permission)
        db.commit()
        db.refresh(permission)
        return permission
