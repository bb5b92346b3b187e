"""Billing-period tags derived from a charge date."""

from __future__ import annotations

import calendar
import math
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from ...config import settings


def billing_zone() -> ZoneInfo:
    return ZoneInfo(settings.billing_timezone)


def localize(moment: datetime) -> datetime:
    """Express ``moment`` in the billing timezone; naive values are taken as local."""

    zone = billing_zone()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=zone)
    return moment.astimezone(zone)


def billing_period(charged_at: datetime) -> tuple[int, int]:
    """Return ``(week, year)`` for a charge date.

    Week one starts on January 1st and every block of seven whole days opens
    a new week. This is not the ISO calendar week; stored records rely on it.
    """

    local = localize(charged_at)
    start_of_year = local.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    days = (local - start_of_year) // timedelta(days=1)
    return math.ceil((days + 1) / 7), local.year


def month_window(now: datetime) -> tuple[datetime, datetime]:
    """First instant of the month of ``now`` through the last instant of its last day."""

    local = localize(now)
    last_day = calendar.monthrange(local.year, local.month)[1]
    start = local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    end = local.replace(day=last_day, hour=23, minute=59, second=59, microsecond=999999)
    return start, end
