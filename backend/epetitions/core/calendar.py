"""Calendar Helpers — day boundaries, month arithmetic and date parsing.

Invariants:
    - end_of_day keeps the input's tzinfo (23:59:59.999999 on the same date)
    - add_months clamps the day to the length of the target month
      (31 Aug + 6 months = 28/29 Feb)
    - parse_debate_date accepts ISO (YYYY-MM-DD) and day-first (DD/MM/YYYY)
"""

import calendar
from datetime import date, datetime, time


def end_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.max, tzinfo=moment.tzinfo)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by whole calendar months, clamping the day of month."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def parse_debate_date(value: str) -> date:
    """Parse a scheduled debate date. Raises ValueError on anything else."""
    value = value.strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"'{value}' is not a valid date")
