"""Date manipulation utilities"""

from datetime import date, timedelta
from typing import List, Tuple


def last_n_months(today: date, n: int) -> List[Tuple[int, int]]:
    """(year, month) pairs for the last n calendar months, oldest first, ending with today's month"""
    months = []
    for offset in range(n - 1, -1, -1):
        total = today.year * 12 + (today.month - 1) - offset
        months.append((total // 12, total % 12 + 1))
    return months


def reminder_window(today: date, days: int) -> Tuple[date, date]:
    """Inclusive date range from today up to `days` days ahead"""
    return today, today + timedelta(days=days)
