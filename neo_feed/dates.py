from datetime import date, timedelta
from typing import Optional, Tuple

from .config import MAX_RANGE_DAYS
from .errors import ValidationError
from .schemas import SortOrder


def parse_date(value: str, field: str = "date") -> date:
    # fromisoformat accepts more than YYYY-MM-DD on newer interpreters
    if len(value) != 10:
        raise ValidationError(f"Invalid {field}: expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid {field}: expected YYYY-MM-DD")


def default_range(today: Optional[date] = None) -> Tuple[date, date]:
    start = today or date.today()
    return start, start + timedelta(days=MAX_RANGE_DAYS)


def check_range(start: date, end: date, max_days: int = MAX_RANGE_DAYS) -> None:
    if end < start:
        raise ValidationError("End date must be after start date")
    if (end - start).days > max_days:
        raise ValidationError(f"Date range cannot exceed {max_days} days")


def parse_range(
    start_date: Optional[str], end_date: Optional[str], today: Optional[date] = None
) -> Tuple[date, date]:
    default_start, default_end = default_range(today)
    start = parse_date(start_date, "start_date") if start_date else default_start
    end = parse_date(end_date, "end_date") if end_date else default_end
    check_range(start, end)
    return start, end


def next_range(end: date, days: int = MAX_RANGE_DAYS) -> Tuple[date, date]:
    """Window for "load more": starts on the current end date."""

    if days < 1:
        raise ValidationError("days must be at least 1")
    new_end = end + timedelta(days=days)
    check_range(end, new_end)
    return end, new_end


def parse_flag(value: Optional[str], field: str) -> bool:
    if value is None:
        return False
    lowered = value.lower()
    if lowered in {"true", "1"}:
        return True
    if lowered in {"false", "0"}:
        return False
    raise ValidationError(f"Invalid {field}")


def parse_sort(value: Optional[str]) -> SortOrder:
    if value is None:
        return SortOrder.APPROACH_ASC
    try:
        return SortOrder(value)
    except ValueError:
        raise ValidationError(f"Invalid sort: {value}")
