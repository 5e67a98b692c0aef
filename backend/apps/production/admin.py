from django.contrib import admin

from apps.production.models import BatchIngredient, Pallet, ProductionRun


class BatchIngredientInline(admin.TabularInline):
    model = BatchIngredient
    extra = 0
    readonly_fields = ("ingredient_lot", "quantity_used", "added_at", "added_by")
    can_delete = False


class PalletInline(admin.TabularInline):
    model = Pallet
    extra = 0


@admin.register(ProductionRun)
class ProductionRunAdmin(admin.ModelAdmin):
    list_display = ("daily_lot", "recipe", "status", "quality_status", "planned_quantity", "actual_quantity", "created_at")
    list_filter = ("status", "quality_status")
    search_fields = ("daily_lot", "cake_lot", "icing_lot", "recipe__name")
    inlines = (BatchIngredientInline, PalletInline)


@admin.register(Pallet)
class PalletAdmin(admin.ModelAdmin):
    list_display = ("pallet_code", "production_run", "shipping_status", "quantity_packed", "customer_order", "shipped_at")
    list_filter = ("shipping_status",)
    search_fields = ("pallet_code", "customer_order", "production_run__daily_lot")
