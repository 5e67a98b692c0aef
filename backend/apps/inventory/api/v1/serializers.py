from rest_framework import serializers

from apps.inventory.models import IngredientLot


class IngredientLotSerializer(serializers.ModelSerializer):
    ingredient_name = serializers.CharField(source="ingredient.name", read_only=True)
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    allergens = serializers.JSONField(source="ingredient.allergens", read_only=True)

    class Meta:
        model = IngredientLot
        fields = (
            "id",
            "ingredient",
            "ingredient_name",
            "allergens",
            "supplier",
            "supplier_name",
            "supplier_lot_code",
            "internal_lot_code",
            "received_date",
            "expiration_date",
            "manufacture_date",
            "quantity_received",
            "quantity_remaining",
            "quality_status",
            "status",
            "storage_location",
            "notes",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "quantity_remaining", "status", "created_at", "updated_at")

    def validate_quantity_received(self, value):
        if value <= 0:
            raise serializers.ValidationError("quantity_received must be greater than 0.")
        return value

    def validate(self, attrs):
        received_date = attrs.get("received_date")
        expiration_date = attrs.get("expiration_date")
        manufacture_date = attrs.get("manufacture_date")
        errors = {}
        if manufacture_date and received_date and manufacture_date > received_date:
            errors["manufacture_date"] = "manufacture_date cannot be after received_date."
        if expiration_date and manufacture_date and expiration_date < manufacture_date:
            errors["expiration_date"] = "expiration_date cannot be before manufacture_date."
        if errors:
            raise serializers.ValidationError(errors)
        return attrs

    def create(self, validated_data):
        validated_data["quantity_remaining"] = validated_data["quantity_received"]
        return super().create(validated_data)
