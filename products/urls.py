from django.urls import path, re_path
from . import views

app_name = "products"

urlpatterns = [
    # 🥐 JSON API
    re_path(r"^$", views.products_api, name="api"),
    re_path(r"^reorder/?$", views.products_reorder_api, name="reorder"),

    # 📋 Catalog page
    path("catalog/", views.product_catalog, name="catalog"),
]
