from typing import Optional

from pydantic import BaseModel, field_validator

from .capabilities import Capability


class CapabilityUpdate(BaseModel):
    capabilities: list[str]

    @field_validator("capabilities")
    @classmethod
    def validate_capabilities(cls, v):
        # Raises ValueError on unknown names
        Capability.from_names(v)
        return [name.strip().upper() for name in v]


class FormPermissionResponse(BaseModel):
    rolId: int
    formId: int
    formCode: Optional[str] = None
    capabilities: list[str]
    canView: bool
    canInsert: bool
    canUpdate: bool
    canDelete: bool


class UserPermissionsResponse(BaseModel):
    userId: int
    forms: dict[str, list[str]]
