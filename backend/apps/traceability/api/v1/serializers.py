from rest_framework import serializers

from apps.traceability.models import RecallExecution


class RecallExecutionRequestSerializer(serializers.Serializer):
    reason = serializers.CharField()
    executed_by = serializers.CharField(max_length=128, required=False, allow_blank=True, allow_null=True)

    def validate_reason(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("reason cannot be blank.")
        return value


class RecallExecutionSerializer(serializers.ModelSerializer):
    internal_lot_code = serializers.CharField(source="ingredient_lot.internal_lot_code", read_only=True)

    class Meta:
        model = RecallExecution
        fields = (
            "id",
            "ingredient_lot",
            "internal_lot_code",
            "idempotency_key",
            "status",
            "reason",
            "executed_by",
            "result",
            "started_at",
            "finished_at",
        )
        read_only_fields = fields
