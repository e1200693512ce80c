from django.urls import path, re_path
from . import views

app_name = "inventory"

urlpatterns = [
    # 📦 JSON API
    re_path(r"^$", views.inventory_api, name="api"),
    path("<int:product_id>/<str:date>/", views.inventory_detail, name="detail"),
]
