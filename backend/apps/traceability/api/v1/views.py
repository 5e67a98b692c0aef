import logging

from django.db import DatabaseError
from django.utils import timezone
from rest_framework import mixins, viewsets
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.api.exceptions import ServiceFailure
from apps.traceability.api.v1.serializers import RecallExecutionRequestSerializer, RecallExecutionSerializer
from apps.traceability.models import RecallExecution
from apps.traceability.repository import DjangoTraceabilityRepository
from apps.traceability.services.backward import trace_backward
from apps.traceability.services.execution import execute_recall
from apps.traceability.services.forward import trace_forward
from apps.traceability.services.recall import RecallPolicy, assess_recall
from apps.traceability.services.resolver import resolve_lot, resolve_lot_lineage, resolve_pallet

logger = logging.getLogger(__name__)


class TraceabilityView(APIView):
    repository_class = DjangoTraceabilityRepository
    failure_message = "Failed to perform traceability"
    failure_code = "TRACEABILITY_ERROR"

    def get_repository(self):
        return self.repository_class()

    def build(self, repository, identifier) -> dict:
        raise NotImplementedError

    def get(self, request, identifier):
        try:
            payload = self.build(self.get_repository(), identifier)
        except APIException:
            raise
        except Exception as exc:
            logger.exception("%s for %s", self.failure_message, identifier)
            raise ServiceFailure(self.failure_message, code=self.failure_code, details={"message": str(exc)}) from exc
        return Response(payload)


class ForwardTraceView(TraceabilityView):
    failure_message = "Failed to perform forward traceability"

    def build(self, repository, identifier):
        lineage = resolve_lot_lineage(repository, identifier)
        payload = trace_forward(lineage)
        logger.info(
            "Forward trace of lot %s: %d run(s), %d pallet(s)",
            lineage.lot.internal_lot_code,
            payload["impact"]["total_production_runs"],
            payload["impact"]["total_pallets"],
        )
        return payload


class BackwardTraceView(TraceabilityView):
    failure_message = "Failed to perform backward traceability"

    def build(self, repository, identifier):
        lineage = resolve_pallet(repository, identifier)
        payload = trace_backward(lineage, timezone.localdate())
        logger.info(
            "Backward trace of pallet %s: %d lot(s), %d risk factor(s)",
            lineage.pallet.pallet_code,
            payload["summary"]["total_ingredient_lots"],
            payload["risk_assessment"]["total_risk_factors"],
        )
        return payload


class RecallAssessmentView(TraceabilityView):
    failure_message = "Failed to perform recall impact assessment"
    failure_code = "RECALL_ASSESSMENT_ERROR"

    def build(self, repository, identifier):
        lineage = resolve_lot_lineage(repository, identifier)
        payload = assess_recall(lineage, timezone.now(), RecallPolicy.from_settings())
        logger.info(
            "Recall assessment of lot %s: score %s (%s)",
            lineage.lot.internal_lot_code,
            payload["risk_assessment"]["total_risk_score"],
            payload["risk_assessment"]["risk_level"],
        )
        return payload


class RecallExecutionView(APIView):
    repository_class = DjangoTraceabilityRepository

    def post(self, request, identifier):
        try:
            lot = resolve_lot(self.repository_class(), identifier)
        except DatabaseError as exc:
            logger.exception("Recall execution lookup failed for %s", identifier)
            raise ServiceFailure(
                "Failed to execute recall",
                code="RECALL_EXECUTION_ERROR",
                details={"message": str(exc)},
            ) from exc

        serializer = RecallExecutionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data, status_code = execute_recall(
            lot.id,
            serializer.validated_data["reason"],
            executed_by=serializer.validated_data.get("executed_by") or None,
            idempotency_key=request.headers.get("Idempotency-Key"),
        )
        return Response(data, status=status_code)


class RecallExecutionViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = RecallExecutionSerializer

    def get_queryset(self):
        queryset = RecallExecution.objects.select_related("ingredient_lot")
        if self.action != "list":
            return queryset

        lot_id = self.request.query_params.get("ingredient_lot")
        if lot_id:
            if not lot_id.isdigit():
                raise ValidationError({"ingredient_lot": "Must be a numeric ingredient lot id."})
            queryset = queryset.filter(ingredient_lot_id=int(lot_id))
        return queryset.order_by("-started_at", "-id")
