from django.urls import path
from . import views

app_name = "reports"

urlpatterns = [
    # 📊 Pages
    path("", views.dashboard, name="dashboard"),
    path("dashboard/<str:date>/", views.date_detail, name="date_detail"),
    path("forecasts/", views.forecast_history_view, name="forecast_history"),

    # 📦 JSON
    path("reports/summary/", views.summary_api, name="summary_api"),
    path("reports/forecasts/", views.forecasts_api, name="forecasts_api"),
]
