from django.contrib import admin

from apps.inventory.models import IngredientLot


@admin.register(IngredientLot)
class IngredientLotAdmin(admin.ModelAdmin):
    list_display = (
        "internal_lot_code",
        "ingredient",
        "supplier",
        "quality_status",
        "status",
        "quantity_received",
        "quantity_remaining",
        "expiration_date",
    )
    search_fields = ("internal_lot_code", "supplier_lot_code", "ingredient__name")
    list_filter = ("quality_status", "status")
    readonly_fields = ("quantity_remaining",)
