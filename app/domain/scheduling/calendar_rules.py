"""
Calendar rules deciding whether a branch accepts bookings on a date.

Rules are checked in a fixed order and the first failing rule wins:
Sunday, holiday (national or for the branch), past date.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...shared.clock import utc_today
from ..catalogs.repository import CatalogRepository

logger = logging.getLogger(__name__)

SUNDAY = 6  # date.weekday()

SUNDAY_MESSAGE = "Appointments cannot be scheduled on Sundays"
HOLIDAY_MESSAGE = "Appointments cannot be scheduled on holidays"
PAST_DATE_MESSAGE = "Appointments cannot be scheduled on past dates"


@dataclass(frozen=True)
class DateCheck:
    is_bookable: bool
    reason: Optional[str] = None


class CalendarRules:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepository()

    def check_bookable(self, branch_id: int, day: date, today: Optional[date] = None) -> DateCheck:
        if day.weekday() == SUNDAY:
            return DateCheck(False, SUNDAY_MESSAGE)

        holiday = self.repo.find_active_holiday(self.db, day, branch_id)
        if holiday:
            logger.info(f"📅 {day} is a holiday for branch {branch_id}: {holiday.holiday_name}")
            return DateCheck(False, f"{HOLIDAY_MESSAGE}. {holiday.holiday_name or 'Holiday'}")

        if day < (today or utc_today()):
            return DateCheck(False, PAST_DATE_MESSAGE)

        return DateCheck(True)
