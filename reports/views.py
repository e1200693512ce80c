from django.conf import settings
from django.http import Http404
from django.shortcuts import render

from core.exceptions import ValidationError
from core.utils import parse_date, parse_int
from core.views import json_view
from inventory.models import InventoryRecord
from .aggregation import (
    daily_summaries,
    forecast_accuracy,
    forecast_history,
    per_date_summary,
    performance_band,
    record_precision,
    sell_through,
    sold,
)


def recent_records(limit, forecasts_only=False):
    """Records of the ``limit`` most recent dates that have any."""
    records = InventoryRecord.objects.select_related("product")
    if forecasts_only:
        records = records.filter(planned__isnull=False)
    dates = list(
        records.order_by("-date").values_list("date", flat=True).distinct()[:limit]
    )
    return records.filter(date__in=dates).order_by("-date", "product__order", "product__name")


def _limit(request):
    value = request.GET.get("limit")
    if value in (None, ""):
        return settings.REPORT_RECENT_DATES
    return parse_int(value, "limit", minimum=1)


# 📊 Dashboard: sell-through of the last dates
def dashboard(request):
    limit = settings.REPORT_RECENT_DATES
    summaries = daily_summaries(recent_records(limit), limit=limit)
    return render(request, "reports/dashboard.html", {"summaries": summaries})


# 🔎 One date, product by product
def date_detail(request, date):
    try:
        day = parse_date(date)
    except ValidationError:
        raise Http404("Date invalide.")
    records = list(
        InventoryRecord.objects.select_related("product")
        .filter(date=day)
        .order_by("product__order", "product__name")
    )
    rows = []
    for record in records:
        pct = sell_through(record)
        rows.append({
            "record": record,
            "sold": sold(record),
            "sell_through_pct": pct,
            "band": performance_band(pct),
        })
    context = {
        "day": day,
        "rows": rows,
        "summary": per_date_summary(records, date=day),
        "forecast": forecast_accuracy(records, date=day),
    }
    return render(request, "reports/date_detail.html", context)


# 📈 Forecast history: planned vs produced
def forecast_history_view(request):
    limit = settings.REPORT_RECENT_DATES
    records = list(recent_records(limit, forecasts_only=True))
    history = []
    for summary in forecast_history(records, limit=limit):
        details = [
            {"record": r, "precision_pct": record_precision(r)}
            for r in records if r.date == summary.date
        ]
        history.append({"summary": summary, "details": details})
    return render(request, "reports/forecast_history.html", {"history": history})


@json_view
def summary_api(request):
    limit = _limit(request)
    return [summary.as_dict() for summary in daily_summaries(recent_records(limit), limit=limit)]


@json_view
def forecasts_api(request):
    limit = _limit(request)
    records = recent_records(limit, forecasts_only=True)
    return [summary.as_dict() for summary in forecast_history(records, limit=limit)]
