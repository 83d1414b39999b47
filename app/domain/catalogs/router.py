"""Catalog router - branches, appointment types and holidays"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Holiday, User
from ...shared.clock import utc_today
from ...shared.responses import raise_for_failure
from ..permissions.capabilities import HOLIDAYS_FORM, Capability
from ..permissions.dependencies import require_capability
from .schemas import (
    AppointmentTypeResponse,
    BranchResponse,
    HolidayCreate,
    HolidayResponse,
    LocalHolidayCreate,
)
from .service import CatalogService

router = APIRouter(prefix="/catalogs", tags=["Catalogs"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


def _holiday_response(h: Holiday) -> HolidayResponse:
    return HolidayResponse(
        id=h.id,
        holidayDate=h.holiday_date,
        holidayName=h.holiday_name,
        holidayType=h.holiday_type,
        branchId=h.branch_id,
    )


@router.get("/branches", response_model=list[BranchResponse])
async def list_branches(service: CatalogService = Depends(get_catalog_service)):
    return [
        BranchResponse(
            id=b.id,
            name=b.name,
            code=b.code,
            address=b.address,
            phone=b.phone,
            city=b.city,
            isMain=b.is_main,
        )
        for b in service.list_branches()
    ]


@router.get("/appointment-types", response_model=list[AppointmentTypeResponse])
async def list_appointment_types(service: CatalogService = Depends(get_catalog_service)):
    return [
        AppointmentTypeResponse(id=t.id, name=t.name, description=t.description)
        for t in service.list_appointment_types()
    ]


@router.get("/holidays", response_model=list[HolidayResponse])
async def list_holidays(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    branch_id: Optional[int] = Query(None),
    service: CatalogService = Depends(get_catalog_service),
):
    """Holidays of a year (current year by default), optionally including a branch's local ones"""
    year = year or utc_today().year
    return [_holiday_response(h) for h in service.list_holidays(year, branch_id)]


@router.post("/holidays/national", response_model=HolidayResponse)
async def create_national_holiday(
    data: HolidayCreate,
    _user: User = Depends(require_capability(HOLIDAYS_FORM, Capability.INSERT)),
    service: CatalogService = Depends(get_catalog_service),
):
    result = service.create_national_holiday(data.holidayDate, data.holidayName)
    raise_for_failure(result)
    return _holiday_response(result.data)


@router.post("/holidays/local", response_model=HolidayResponse)
async def create_local_holiday(
    data: LocalHolidayCreate,
    _user: User = Depends(require_capability(HOLIDAYS_FORM, Capability.INSERT)),
    service: CatalogService = Depends(get_catalog_service),
):
    result = service.create_local_holiday(data.holidayDate, data.holidayName, data.branchId)
    raise_for_failure(result)
    return _holiday_response(result.data)


@router.post("/holidays/company", response_model=HolidayResponse)
async def create_company_holiday(
    data: HolidayCreate,
    _user: User = Depends(require_capability(HOLIDAYS_FORM, Capability.INSERT)),
    service: CatalogService = Depends(get_catalog_service),
):
    result = service.create_company_holiday(data.holidayDate, data.holidayName)
    raise_for_failure(result)
    return _holiday_response(result.data)
