from django.contrib import messages
from django.db.models import Count
from django.http import JsonResponse
from django.shortcuts import render, redirect

from core.decorators import security_code_required
from core.exceptions import ValidationError
from core.utils import parse_bool
from core.views import json_view, method_not_allowed
from .forms import ProductBulkForm
from .utils import (
    bulk_create_products,
    bulk_reorder_products,
    delete_product,
    list_products,
    update_product,
)


@json_view
def products_api(request):
    """GET list / POST bulk create / PUT update / DELETE on /products/."""
    if request.method == "GET":
        return [product.as_dict() for product in list_products()]
    if request.method == "POST":
        return product_create(request)
    if request.method == "PUT":
        return product_update(request)
    if request.method == "DELETE":
        return product_delete(request)
    return method_not_allowed(request, ["GET", "POST", "PUT", "DELETE"])


def product_create(request):
    count = bulk_create_products(request.json_body.get("names"))
    return JsonResponse(
        {"message": f"{count} produit(s) ajouté(s).", "count": count},
        status=201,
    )


@security_code_required
def product_update(request):
    payload = request.json_body
    product = update_product(
        payload.get("id"),
        new_name=payload.get("newName"),
        new_order=payload.get("newOrder"),
    )
    return {"message": "Produit modifié avec succès.", "product": product.as_dict()}


@security_code_required
def product_delete(request):
    payload = request.json_body
    force = parse_bool(payload.get("force", False))
    deleted = delete_product(payload.get("id"), force=force)

    if deleted:
        message = f"Produit et {deleted} inventaire(s) supprimé(s) avec succès."
    else:
        message = "Produit supprimé avec succès."
    return {"message": message, "deletedInventoryCount": deleted}


@json_view
def products_reorder_api(request):
    if request.method != "PUT":
        return method_not_allowed(request, ["PUT"])
    return product_reorder(request)


@security_code_required
def product_reorder(request):
    if "newOrder" not in request.json_body:
        raise ValidationError("Format invalide. Attendu: { newOrder: [id1, id2, ...] }")
    products, performance = bulk_reorder_products(request.json_body["newOrder"])
    return {
        "message": f"Réorganisation de {len(products)} produits réussie en {performance['duration']}.",
        "success": len(products),
        "data": [product.as_dict() for product in products],
        "performance": performance,
    }


# 🥐 Catalog page: list + bulk add
def product_catalog(request):
    form = ProductBulkForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        try:
            count = bulk_create_products(form.cleaned_data["names"])
        except ValidationError as e:
            form.add_error("names", e.message)
        else:
            messages.success(request, f"✅ {count} produit(s) ajouté(s).")
            return redirect("products:catalog")

    products = list_products().annotate(record_count=Count("inventory_records"))
    return render(request, "products/catalog.html", {"form": form, "products": products})
