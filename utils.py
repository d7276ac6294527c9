"""
Utility functions for TripLedger
"""
from __future__ import annotations
import math
import os
from datetime import date, datetime, timezone


def today_str() -> str:
    """Get today's date as ISO string"""
    return date.today().isoformat()


def now_iso() -> str:
    """Current UTC timestamp, millisecond precision, 'Z' suffix"""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string (a trailing time part is ignored)"""
    return datetime.strptime(s.strip()[:10], "%Y-%m-%d").date()


def safe_float(x, default: float = 0.0) -> float:
    """Convert value to float safely, returning default on error or NaN"""
    try:
        v = float(x)
    except Exception:
        return default
    if math.isnan(v):
        return default
    return v


def month_difference(start: date, end: date) -> int:
    """Calendar-month distance; day of month is ignored"""
    return (end.year - start.year) * 12 + (end.month - start.month)


def days_difference(start: date, end: date) -> int:
    """Absolute distance in whole days"""
    return abs((end - start).days)


def format_currency(value: float) -> str:
    """Format amount as euros, Spanish style: 1234,50 € / 12.345,67 €"""
    value = safe_float(value)
    sign = "-" if value < 0 else ""
    whole, cents = f"{abs(value):.2f}".split(".")
    # es-ES only groups thousands from five integer digits up
    if len(whole) > 4:
        groups = []
        while whole:
            groups.insert(0, whole[-3:])
            whole = whole[:-3]
        whole = ".".join(groups)
    return f"{sign}{whole},{cents} €"


def app_dir() -> str:
    """
    Get application data directory: $TRIP_LEDGER_HOME or ~/.trip_ledger
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("TRIP_LEDGER_HOME") or os.path.join(os.path.expanduser("~"), ".trip_ledger")
    os.makedirs(path, exist_ok=True)
    return path
