from datetime import date
from typing import Optional

from pydantic import BaseModel, Field


class BranchResponse(BaseModel):
    id: int
    name: str
    code: str
    address: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    isMain: bool


class AppointmentTypeResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None


class HolidayCreate(BaseModel):
    holidayDate: date
    holidayName: str = Field(..., max_length=200)


class LocalHolidayCreate(HolidayCreate):
    branchId: int


class HolidayResponse(BaseModel):
    id: int
    holidayDate: date
    holidayName: str
    holidayType: str
    branchId: Optional[int] = None
