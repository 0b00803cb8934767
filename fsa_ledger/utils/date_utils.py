"""Date manipulation utilities"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from fsa_ledger.domain.models import PlanYear


def utcnow() -> datetime:
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


def today_in(tz_name: str) -> date:
    """Current calendar date in the given IANA time zone"""
    return datetime.now(ZoneInfo(tz_name)).date()


def calendar_plan_year(on: date) -> PlanYear:
    """Plan year containing a date: January 1 through December 31"""
    return PlanYear(start=date(on.year, 1, 1), end=date(on.year, 12, 31))
