from rest_framework import serializers

from apps.catalog.models import Allergen, Ingredient, Recipe, Supplier


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ("id", "name", "contact_email", "metadata", "created_at", "updated_at")
        read_only_fields = ("id", "created_at", "updated_at")


class IngredientSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True, default=None)

    class Meta:
        model = Ingredient
        fields = (
            "id",
            "name",
            "supplier",
            "supplier_name",
            "supplier_code",
            "storage_type",
            "shelf_life_days",
            "allergens",
            "certifications",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_allergens(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("allergens must be a list of strings.")
        normalized = []
        for item in value:
            tag = item.strip().lower()
            if tag and tag not in normalized:
                normalized.append(tag)
        unknown = [tag for tag in normalized if tag not in Allergen.values]
        if unknown:
            raise serializers.ValidationError(
                f"Unknown allergens: {', '.join(unknown)}. Must be one of: {', '.join(Allergen.values)}"
            )
        return normalized

    def validate_certifications(self, value):
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise serializers.ValidationError("certifications must be a list of strings.")
        return [item.strip() for item in value if item.strip()]


class RecipeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Recipe
        fields = (
            "id",
            "name",
            "version",
            "description",
            "yield_quantity",
            "yield_unit",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")
