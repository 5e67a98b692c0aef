import logging

from django.db.models import Q
from django.utils import timezone
from rest_framework import mixins, viewsets
from rest_framework.exceptions import ValidationError

from apps.inventory.api.v1.serializers import IngredientLotSerializer
from apps.inventory.models import IngredientLot, QualityStatus

logger = logging.getLogger(__name__)

TRUTHY = {"1", "true", "True"}


class IngredientLotViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = IngredientLotSerializer

    def get_queryset(self):
        queryset = IngredientLot.objects.select_related("ingredient", "supplier")
        if self.action != "list":
            return queryset

        params = self.request.query_params
        query = (params.get("q") or "").strip()
        if query:
            queryset = queryset.filter(
                Q(internal_lot_code__icontains=query)
                | Q(supplier_lot_code__icontains=query)
                | Q(ingredient__name__icontains=query)
            )

        quality_status = params.get("quality_status")
        if quality_status:
            if quality_status not in QualityStatus.values:
                raise ValidationError(
                    {"quality_status": f"Must be one of: {', '.join(QualityStatus.values)}"}
                )
            queryset = queryset.filter(quality_status=quality_status)

        supplier = (params.get("supplier") or "").strip()
        if supplier:
            queryset = queryset.filter(supplier__name__icontains=supplier)

        ingredient_id = params.get("ingredient")
        if ingredient_id:
            if not ingredient_id.isdigit():
                raise ValidationError({"ingredient": "Must be a numeric ingredient id."})
            queryset = queryset.filter(ingredient_id=int(ingredient_id))

        if params.get("show_expired") not in TRUTHY:
            today = timezone.localdate()
            queryset = queryset.filter(Q(expiration_date__isnull=True) | Q(expiration_date__gt=today))

        return queryset.order_by("-received_date", "internal_lot_code")

    def perform_create(self, serializer):
        lot = serializer.save()
        logger.info("Received ingredient lot %s (%s %s)", lot.internal_lot_code, lot.quantity_received, lot.ingredient.name)
