from django.contrib import admin

from apps.catalog.models import Ingredient, Recipe, Supplier


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "contact_email", "created_at")
    search_fields = ("name",)


@admin.register(Ingredient)
class IngredientAdmin(admin.ModelAdmin):
    list_display = ("name", "supplier", "storage_type", "is_active", "created_at")
    list_filter = ("storage_type", "is_active")
    search_fields = ("name", "supplier__name", "supplier_code")


@admin.register(Recipe)
class RecipeAdmin(admin.ModelAdmin):
    list_display = ("name", "version", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name",)
