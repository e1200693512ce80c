from core.views import json_view, method_not_allowed
from .utils import get_record, list_records, upsert_entries


@json_view
def inventory_api(request):
    """GET filtered list / POST batch upsert on /inventory/."""
    if request.method == "GET":
        records = list_records(
            date=request.GET.get("date"),
            product_id=request.GET.get("productId"),
            limit=request.GET.get("limit"),
        )
        return [record.as_dict() for record in records]
    if request.method == "POST":
        return inventory_upsert(request)
    return method_not_allowed(request, ["GET", "POST"])


def inventory_upsert(request):
    payload = request.json_body
    # A bare entry (no "inventories" wrapper) is treated as a batch of one
    if "inventories" not in payload and "productId" in payload:
        entries = [payload]
    else:
        entries = payload.get("inventories")

    report = upsert_entries(entries)
    response = {
        "message": f"{len(report.succeeded)} inventaire(s) traité(s)",
        "success": len(report.succeeded),
        "data": [record.as_dict() for record in report.succeeded],
        "results": [outcome.as_dict() for outcome in report.outcomes],
        "performance": report.performance,
    }
    if report.failed:
        response["errors"] = report.failed
    return response


@json_view
def inventory_detail(request, product_id, date):
    if request.method != "GET":
        return method_not_allowed(request, ["GET"])
    return get_record(product_id, date).as_dict()
