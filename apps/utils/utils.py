import calendar
from datetime import datetime, time

from django.core.files.storage import default_storage
from django.utils import timezone

from .exceptions import BusinessLogicException


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def parse_date(value, message="Invalid date format provided"):
    """
    Parse a YYYY-MM-DD query value. Empty values return None.
    """
    if value in (None, ""):
        return None
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").date()
    except ValueError:
        raise BusinessLogicException(message, code="invalid_date")


def start_of_day(day):
    return timezone.make_aware(datetime.combine(day, time.min))


def end_of_day(day):
    return timezone.make_aware(datetime.combine(day, time.max))


def date_range(from_value=None, to_value=None, message="Invalid date format provided"):
    """
    Turns optional from/to query strings into aware datetimes.
    The upper bound covers the whole of the ``to`` day.
    """
    from_day = parse_date(from_value, message)
    to_day = parse_date(to_value, message)
    return (
        start_of_day(from_day) if from_day else None,
        end_of_day(to_day) if to_day else None,
    )


def apply_date_range(queryset, field, start=None, end=None):
    if start:
        queryset = queryset.filter(**{f"{field}__gte": start})
    if end:
        queryset = queryset.filter(**{f"{field}__lte": end})
    return queryset


def month_start(moment):
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def add_months(moment, months):
    """Shift a date or datetime by whole months (may be negative), clamping the day."""
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = index // 12, index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def format_long_date(value):
    """12 March 2025"""
    if isinstance(value, datetime):
        value = timezone.localtime(value) if timezone.is_aware(value) else value
    return f"{value.day} {value.strftime('%B %Y')}"


# ---------------------------------------------------------------------------
# Money
# ---------------------------------------------------------------------------

def _indian_grouping(number: int) -> str:
    digits = str(abs(number))
    if len(digits) <= 3:
        grouped = digits
    else:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        grouped = ",".join(groups) + "," + tail
    return f"-{grouped}" if number < 0 else grouped


def format_rupees(amount) -> str:
    """₹1,23,457 (whole rupees)"""
    return f"₹{_indian_grouping(int(round(amount)))}"


def format_paise(paise: int) -> str:
    """₹1,234.50 from 123450 paise"""
    rupees, rest = divmod(abs(int(paise)), 100)
    sign = "-" if paise < 0 else ""
    return f"{sign}₹{_indian_grouping(rupees)}.{rest:02d}"


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------

def store_upload(uploaded_file, path: str) -> str:
    """
    Save an uploaded file through the configured storage and return its public URL.
    """
    uploaded_file.seek(0)
    name = default_storage.save(path, uploaded_file)
    return default_storage.url(name)
