import time
from datetime import date, datetime

from django.utils import timezone
from django.utils.dateparse import parse_date as django_parse_date

from .exceptions import ValidationError

# Largest value an IntegerField / PositiveIntegerField column holds
MAX_INT = 2147483647


def today():
    return timezone.localdate()


def parse_date(value, field="date"):
    """
    Accept a date, a datetime or an ISO string ("2025-10-26",
    "2025-1-5" or "2025-10-26T08:00:00Z"); the time of day is dropped.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field}: date invalide ({value!r}).")
    day_part = value.strip().split("T", 1)[0].split(" ", 1)[0]
    try:
        parsed = django_parse_date(day_part)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{field}: date invalide ({value!r}).")
    return parsed


def parse_int(value, field, minimum=None, maximum=MAX_INT):
    """
    Coerce ``value`` to int. Integral strings and floats are accepted,
    booleans and fractional numbers are not. Values above ``maximum``
    (the database column limit by default) are rejected; pass
    ``maximum=None`` to skip that check.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field}: entier attendu.")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field}: entier attendu.")
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ValidationError(f"{field}: entier attendu.")
    elif not isinstance(value, int):
        raise ValidationError(f"{field}: entier attendu.")
    if minimum is not None and value < minimum:
        raise ValidationError(f"{field}: doit être supérieur ou égal à {minimum}.")
    if maximum is not None and value > maximum:
        raise ValidationError(f"{field}: doit être inférieur ou égal à {maximum}.")
    return value


def parse_id(value, field="id"):
    """
    Parse a primary key. Returns None for an integer no row can have
    (out of the column range), so callers report it as not found.
    """
    pk = parse_int(value, field, maximum=None)
    if pk < 1 or pk > MAX_INT:
        return None
    return pk


def chunked(items, size):
    """Yield successive ``size``-long slices of ``items``."""
    size = max(1, int(size))
    for start in range(0, len(items), size):
        yield items[start:start + size]


def elapsed_ms(started):
    """Milliseconds since ``started``, a time.perf_counter() reading."""
    return round((time.perf_counter() - started) * 1000)


def records_per_second(count, duration_ms):
    if duration_ms <= 0:
        return count * 1000
    return round(count / duration_ms * 1000)


def parse_bool(value):
    """JSON booleans pass through; "true"/"1"/"yes"/"on" strings count as True."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    if isinstance(value, int):
        return value == 1
    return False
