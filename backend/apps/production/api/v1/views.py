import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from apps.production.api.v1.serializers import (
    BatchIngredientSerializer,
    PalletSerializer,
    PalletShipmentSerializer,
    ProductionRunSerializer,
)
from apps.production.models import Pallet, ProductionRun, RunStatus, ShippingStatus
from apps.production.services.consumption import record_batch_usage
from apps.production.services.runs import delete_run, ship_pallet, update_run

logger = logging.getLogger(__name__)


class ProductionRunViewSet(
    mixins.ListModelMixin,
    mixins.CreateModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = ProductionRunSerializer
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):
        queryset = ProductionRun.objects.select_related("recipe").prefetch_related(
            "batch_ingredients__ingredient_lot__ingredient",
            "pallets",
        )
        if self.action != "list":
            return queryset

        params = self.request.query_params
        run_status = params.get("status")
        if run_status:
            if run_status not in RunStatus.values:
                raise ValidationError({"status": f"Must be one of: {', '.join(RunStatus.values)}"})
            queryset = queryset.filter(status=run_status)

        daily_lot = (params.get("daily_lot") or "").strip()
        if daily_lot:
            queryset = queryset.filter(daily_lot__icontains=daily_lot)

        return queryset.order_by("-created_at", "id")

    def perform_create(self, serializer):
        run = serializer.save()
        logger.info("Created production run %s for recipe %s", run.daily_lot, run.recipe.name)

    def update(self, request, *args, **kwargs):
        run = self.get_object()
        serializer = self.get_serializer(run, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        update_run(run, serializer.validated_data)
        return Response(self.get_serializer(self.get_object()).data)

    def perform_destroy(self, instance):
        delete_run(instance)

    @action(detail=True, methods=["post"], url_path="ingredients")
    def ingredients(self, request, pk=None):
        run = self.get_object()
        serializer = BatchIngredientSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        usage = record_batch_usage(
            run,
            serializer.validated_data["ingredient_lot"].id,
            serializer.validated_data["quantity_used"],
            added_by=serializer.validated_data.get("added_by"),
            notes=serializer.validated_data.get("notes"),
        )
        return Response(BatchIngredientSerializer(usage).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="pallets")
    def pallets(self, request, pk=None):
        run = self.get_object()
        serializer = PalletSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        pallet = serializer.save(production_run=run)
        logger.info("Packed pallet %s from run %s", pallet.pallet_code, run.daily_lot)
        return Response(PalletSerializer(pallet).data, status=status.HTTP_201_CREATED)


class PalletViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = PalletSerializer

    def get_queryset(self):
        queryset = Pallet.objects.select_related("production_run")
        if self.action != "list":
            return queryset

        params = self.request.query_params
        shipping_status = params.get("shipping_status")
        if shipping_status:
            if shipping_status not in ShippingStatus.values:
                raise ValidationError(
                    {"shipping_status": f"Must be one of: {', '.join(ShippingStatus.values)}"}
                )
            queryset = queryset.filter(shipping_status=shipping_status)

        customer_order = (params.get("customer_order") or "").strip()
        if customer_order:
            queryset = queryset.filter(customer_order=customer_order)

        return queryset.order_by("created_at", "id")

    @action(detail=True, methods=["post"], url_path="ship")
    def ship(self, request, pk=None):
        pallet = self.get_object()
        serializer = PalletShipmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ship_pallet(
            pallet,
            serializer.validated_data["customer_order"],
            shipped_at=serializer.validated_data.get("shipped_at"),
        )
        return Response(PalletSerializer(pallet).data)
