from rest_framework import serializers

from apps.inventory.models import IngredientLot
from apps.production.models import BatchIngredient, Pallet, ProductionRun, RunStatus


class BatchIngredientSerializer(serializers.ModelSerializer):
    ingredient_lot = serializers.PrimaryKeyRelatedField(queryset=IngredientLot.objects.all())
    internal_lot_code = serializers.CharField(source="ingredient_lot.internal_lot_code", read_only=True)
    ingredient_name = serializers.CharField(source="ingredient_lot.ingredient.name", read_only=True)

    class Meta:
        model = BatchIngredient
        fields = (
            "id",
            "production_run",
            "ingredient_lot",
            "internal_lot_code",
            "ingredient_name",
            "quantity_used",
            "added_at",
            "added_by",
            "notes",
        )
        read_only_fields = ("id", "production_run", "added_at")

    def validate_quantity_used(self, value):
        if value <= 0:
            raise serializers.ValidationError("quantity_used must be greater than 0.")
        return value


class PalletSerializer(serializers.ModelSerializer):
    daily_lot = serializers.CharField(source="production_run.daily_lot", read_only=True)

    class Meta:
        model = Pallet
        fields = (
            "id",
            "production_run",
            "daily_lot",
            "pallet_code",
            "quantity_packed",
            "location",
            "shipping_status",
            "packing_date",
            "expiration_date",
            "shipped_at",
            "customer_order",
            "notes",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "production_run", "shipped_at", "created_at", "updated_at")

    def validate_shipping_status(self, value):
        if value not in {"pending", "active"}:
            raise serializers.ValidationError("New pallets must be pending or active.")
        return value

    def validate(self, attrs):
        packing_date = attrs.get("packing_date")
        expiration_date = attrs.get("expiration_date")
        if packing_date and expiration_date and expiration_date < packing_date:
            raise serializers.ValidationError({"expiration_date": "expiration_date cannot be before packing_date."})
        return attrs


class PalletShipmentSerializer(serializers.Serializer):
    customer_order = serializers.CharField(max_length=64)
    shipped_at = serializers.DateTimeField(required=False)

    def validate_customer_order(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("customer_order cannot be blank.")
        return value


class ProductionRunSerializer(serializers.ModelSerializer):
    recipe_name = serializers.CharField(source="recipe.name", read_only=True)
    batch_ingredients = BatchIngredientSerializer(many=True, read_only=True)
    pallets = PalletSerializer(many=True, read_only=True)

    class Meta:
        model = ProductionRun
        fields = (
            "id",
            "recipe",
            "recipe_name",
            "daily_lot",
            "cake_lot",
            "icing_lot",
            "planned_quantity",
            "actual_quantity",
            "start_time",
            "end_time",
            "status",
            "quality_status",
            "quality_notes",
            "primary_operator",
            "equipment_station",
            "temperature",
            "humidity",
            "notes",
            "batch_ingredients",
            "pallets",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_planned_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("planned_quantity must be greater than 0.")
        return value

    def validate_status(self, value):
        if self.instance is None and value not in {RunStatus.PLANNED, RunStatus.IN_PROGRESS}:
            raise serializers.ValidationError("New production runs must be planned or in_progress.")
        return value

    def validate(self, attrs):
        if self.instance is None:
            start_time = attrs.get("start_time")
            end_time = attrs.get("end_time")
            if start_time and end_time and end_time <= start_time:
                raise serializers.ValidationError({"end_time": "end_time must be after start_time."})
        return attrs
