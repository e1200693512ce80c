"""
Sell-through and forecast figures computed from inventory records.

Every function here is pure: it only reads the records it is given, which may
be InventoryRecord instances or plain mappings with the same keys
(``date``, ``remaining``, ``produced``, ``planned``).
"""
from collections import OrderedDict
from dataclasses import dataclass, asdict
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

GOOD_THRESHOLD = 80
AVERAGE_THRESHOLD = 60


def _value(record, name):
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def percentage(part, whole):
    """round(100 * part / whole), halves rounded up; 0 when whole is 0."""
    if not whole:
        return 0
    pct = Decimal(100 * part) / Decimal(whole)
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def sold(record):
    """Units sold = produced - remaining, never below zero. Missing produced counts as 0."""
    return max(0, (_value(record, "produced") or 0) - (_value(record, "remaining") or 0))


def sell_through(record):
    return percentage(sold(record), _value(record, "produced") or 0)


def record_precision(record):
    """Per-product forecast accuracy: produced as a percentage of planned."""
    return percentage(_value(record, "produced") or 0, _value(record, "planned") or 0)


@dataclass
class DateSummary:
    date: object
    product_count: int
    total_produced: int
    total_sold: int
    sell_through_pct: int

    @property
    def band(self):
        return performance_band(self.sell_through_pct)

    def as_dict(self):
        data = asdict(self)
        data["date"] = _iso(self.date)
        data["band"] = self.band
        return data


@dataclass
class ForecastSummary:
    date: object
    product_count: int
    total_planned: int
    total_produced: int
    precision_pct: int

    @property
    def planned_on(self):
        return planned_on(self.date)

    def as_dict(self):
        data = asdict(self)
        data["date"] = _iso(self.date)
        data["planned_on"] = _iso(self.planned_on)
        return data


def _iso(value):
    return value.isoformat() if hasattr(value, "isoformat") else value


def per_date_summary(records, date=None):
    records = list(records)
    if date is None and records:
        date = _value(records[0], "date")
    total_produced = sum(_value(r, "produced") or 0 for r in records)
    total_sold = sum(sold(r) for r in records)
    return DateSummary(
        date=date,
        product_count=len(records),
        total_produced=total_produced,
        total_sold=total_sold,
        sell_through_pct=percentage(total_sold, total_produced),
    )


def forecast_accuracy(records, date=None):
    """Accuracy over the records that carry a planned quantity; the rest are ignored."""
    forecasts = [r for r in records if _value(r, "planned") is not None]
    if date is None and forecasts:
        date = _value(forecasts[0], "date")
    total_planned = sum(_value(r, "planned") for r in forecasts)
    total_produced = sum(_value(r, "produced") or 0 for r in forecasts)
    return ForecastSummary(
        date=date,
        product_count=len(forecasts),
        total_planned=total_planned,
        total_produced=total_produced,
        precision_pct=percentage(total_produced, total_planned),
    )


def group_by_date(records):
    """Records grouped per date, most recent date first."""
    groups = {}
    for record in records:
        groups.setdefault(_value(record, "date"), []).append(record)
    return OrderedDict(
        (day, groups[day]) for day in sorted(groups, key=_sort_key, reverse=True)
    )


def _sort_key(value):
    return _iso(value) or ""


def daily_summaries(records, limit=10):
    groups = group_by_date(records)
    return [per_date_summary(group, date=day) for day, group in list(groups.items())[:limit]]


def forecast_history(records, limit=10):
    forecasts = [r for r in records if _value(r, "planned") is not None]
    groups = group_by_date(forecasts)
    return [forecast_accuracy(group, date=day) for day, group in list(groups.items())[:limit]]


def performance_band(pct):
    if pct >= GOOD_THRESHOLD:
        return "good"
    if pct >= AVERAGE_THRESHOLD:
        return "average"
    return "poor"


def planned_on(day):
    """Forecasts for a day are entered the day before."""
    if hasattr(day, "toordinal"):
        return day - timedelta(days=1)
    return None
