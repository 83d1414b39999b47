"""Client domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ClientResponse(BaseModel):
    id: int
    clientNumber: str
    documentType: str
    documentNumber: str
    fullName: str
    email: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    address: Optional[str] = None
    isActive: bool
    createdAt: datetime
