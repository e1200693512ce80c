from django.contrib import admin
from .models import InventoryRecord


class InventoryRecordInline(admin.TabularInline):
    model = InventoryRecord
    extra = 0
    fields = ("date", "remaining", "produced", "planned")
    ordering = ("-date",)
    show_change_link = True


@admin.register(InventoryRecord)
class InventoryRecordAdmin(admin.ModelAdmin):
    list_display = ("product", "date", "remaining", "produced", "planned", "sold_display")
    list_filter = ("date", "product")
    search_fields = ("product__name",)
    date_hierarchy = "date"
    ordering = ("-date", "product__order", "product__name")
    readonly_fields = ("updated_at",)
    list_select_related = ("product",)

    @admin.display(description="Vendu")
    def sold_display(self, obj):
        return obj.sold
