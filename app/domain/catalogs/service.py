"""Catalog service - holiday management and branch lookups"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Holiday, HolidayType
from ...shared.clock import utc_today, utcnow
from ...shared.results import ErrorKind, OperationResult
from .repository import CatalogRepository

logger = logging.getLogger(__name__)

PAST_HOLIDAY_MESSAGE = "Holidays cannot be created in the past"

DUPLICATE_HOLIDAY_MESSAGES = {
    HolidayType.NATIONAL: "A national holiday already exists on that date",
    HolidayType.LOCAL: "A local holiday already exists on that date for this branch",
    HolidayType.COMPANY: "A company holiday already exists on that date",
}


class CatalogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepository()

    def list_branches(self):
        return self.repo.list_active_branches(self.db)

    def list_appointment_types(self):
        return self.repo.list_active_appointment_types(self.db)

    def list_holidays(self, year: int, branch_id: Optional[int] = None) -> list[Holiday]:
        return self.repo.list_holidays(self.db, year, branch_id)

    def create_national_holiday(self, holiday_date: date, name: str, today: Optional[date] = None) -> OperationResult:
        """National holidays apply to every branch"""
        return self._create(holiday_date, name, HolidayType.NATIONAL, None, today)

    def create_company_holiday(self, holiday_date: date, name: str, today: Optional[date] = None) -> OperationResult:
        """Company-wide closures; like national holidays they apply to every branch"""
        return self._create(holiday_date, name, HolidayType.COMPANY, None, today)

    def create_local_holiday(
        self, holiday_date: date, name: str, branch_id: int, today: Optional[date] = None
    ) -> OperationResult:
        if branch_id <= 0:
            return OperationResult.failure("A local holiday requires a branch", ErrorKind.VALIDATION)
        if not self.repo.get_branch(self.db, branch_id):
            return OperationResult.failure("Branch not found", ErrorKind.NOT_FOUND)
        return self._create(holiday_date, name, HolidayType.LOCAL, branch_id, today)

    def _create(
        self,
        holiday_date: date,
        name: str,
        holiday_type: HolidayType,
        branch_id: Optional[int],
        today: Optional[date],
    ) -> OperationResult:
        if not name or not name.strip():
            return OperationResult.failure("Holiday name is required", ErrorKind.VALIDATION)

        if holiday_date < (today or utc_today()):
            return OperationResult.failure(PAST_HOLIDAY_MESSAGE, ErrorKind.BUSINESS_RULE)

        if self.repo.holiday_exists(self.db, holiday_date, holiday_type.value, branch_id):
            logger.warning(f"⚠️ Duplicate {holiday_type.value} holiday on {holiday_date} (branch={branch_id})")
            return OperationResult.failure(DUPLICATE_HOLIDAY_MESSAGES[holiday_type], ErrorKind.BUSINESS_RULE)

        holiday = self.repo.create_holiday(
            self.db,
            holiday_date=holiday_date,
            holiday_name=name.strip(),
            holiday_type=holiday_type.value,
            branch_id=branch_id,
            is_active=True,
            created_at=utcnow(),
        )
        logger.info(f"📅 Created {holiday_type.value} holiday '{holiday.holiday_name}' on {holiday_date}")
        return OperationResult.success(holiday)
