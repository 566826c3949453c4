# services/lease_calendar.py
"""
Date arithmetic for lease terms and the rent schedule handed to the
external payment subsystem.
"""
from calendar import monthrange
from datetime import date
from typing import Optional

DEFAULT_TERM_MONTHS = 12


def add_months(start: date, months: int) -> date:
     """Same day `months` later, clamped to the end of shorter months."""
     month_index = start.month - 1 + months
     year = start.year + month_index // 12
     month = month_index % 12 + 1
     day = min(start.day, monthrange(year, month)[1])
     return date(year, month, day)


def lease_end_date(start: date, min_term_months: Optional[int]) -> date:
     return add_months(start, min_term_months or DEFAULT_TERM_MONTHS)


def next_rent_due_date(
     start_date: date,
     end_date: date,
     last_due_date: Optional[date] = None,
) -> Optional[date]:
     """
     Due date of the next monthly rent charge.

     The first charge falls on the first of the month following the start
     date; each later one is a month after the last known due date. Returns
     None once the next charge would fall after the lease ends.
     """
     if last_due_date is None:
          due = add_months(start_date.replace(day=1), 1)
     else:
          due = add_months(last_due_date, 1)
     if due > end_date:
          return None
     return due
