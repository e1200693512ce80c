from django.contrib import admin
from django.db.models import Count
from .models import Product
from inventory.admin import InventoryRecordInline


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "order", "record_count", "created_at")
    list_editable = ("order",)
    search_fields = ("name",)
    inlines = [InventoryRecordInline]
    ordering = ("order", "name")
    list_per_page = 50
    readonly_fields = ("created_at",)

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_record_count=Count("inventory_records"))

    @admin.display(description="Inventaires", ordering="_record_count")
    def record_count(self, obj):
        return obj._record_count
