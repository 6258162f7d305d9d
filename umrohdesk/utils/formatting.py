"""Time and money formatting for tables"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union


# UTC offset in hours (Western Indonesia Time: UTC+7)
UTC_OFFSET_HOURS = 7

MONTHS_ID = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]


def utc_now_iso() -> str:
    """Current UTC time as ISO string for timestamp columns"""
    return datetime.now(timezone.utc).isoformat()


def utc_to_local(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Convert UTC datetime to local time.

    Args:
        dt: UTC datetime object (naive values are treated as UTC)

    Returns:
        datetime: Local datetime (UTC + offset), naive
    """
    if dt is None:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt + timedelta(hours=UTC_OFFSET_HOURS)


def format_date(value: Union[date, datetime, None]) -> str:
    """Format as '5 Maret 2025'; datetimes are shifted to local time first"""
    if value is None:
        return "-"
    if isinstance(value, datetime):
        value = utc_to_local(value)
    return f"{value.day} {MONTHS_ID[value.month - 1]} {value.year}"


def format_rupiah(amount: Optional[float]) -> str:
    """Format as 'Rp 1.500.000'"""
    if amount is None:
        return "-"
    return "Rp " + f"{int(round(amount)):,}".replace(",", ".")
