"""Recall execution.

Lot, run and pallet status changes commit together or not at all. The
execution row itself is written outside that transaction so a failed
attempt stays on record.
"""

import json
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.db import DatabaseError, transaction
from django.utils import timezone
from rest_framework import status

from apps.core.api.exceptions import ApiError, Conflict, ServiceFailure
from apps.inventory.models import IngredientLot, LotStatus, QualityStatus
from apps.production.models import BatchIngredient, Pallet, ProductionRun, RunStatus, ShippingStatus
from apps.traceability.models import RecallExecution

logger = logging.getLogger(__name__)


def normalize_payload(data):
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


def find_completed_execution(lot_id: int, idempotency_key):
    if not idempotency_key:
        return None
    execution = (
        RecallExecution.objects.filter(
            idempotency_key=idempotency_key,
            status=RecallExecution.Status.COMPLETED,
        )
        .order_by("-started_at")
        .first()
    )
    if execution and execution.ingredient_lot_id != lot_id:
        raise Conflict(
            "Idempotency-Key was already used for a different ingredient lot",
            code="IDEMPOTENCY_KEY_REUSED",
            details={"idempotency_key": idempotency_key, "ingredient_lot_id": execution.ingredient_lot_id},
        )
    return execution


def start_execution(lot_id: int, reason: str, executed_by, idempotency_key) -> RecallExecution:
    return RecallExecution.objects.create(
        ingredient_lot_id=lot_id,
        idempotency_key=idempotency_key or None,
        status=RecallExecution.Status.STARTED,
        reason=reason,
        executed_by=executed_by,
    )


def complete_execution(execution: RecallExecution, status_code: int, data) -> None:
    execution.status = RecallExecution.Status.COMPLETED
    execution.finished_at = timezone.now()
    execution.result = {"status_code": status_code, "data": normalize_payload(data)}
    execution.save(update_fields=["status", "finished_at", "result", "updated_at"])


def fail_execution(execution: RecallExecution, status_code: int, errors) -> None:
    execution.status = RecallExecution.Status.FAILED
    execution.finished_at = timezone.now()
    execution.result = {"status_code": status_code, "errors": normalize_payload(errors)}
    execution.save(update_fields=["status", "finished_at", "result", "updated_at"])


def _recall_lot(lot_id: int) -> IngredientLot:
    lot = IngredientLot.objects.select_for_update().get(pk=lot_id)
    if lot.status == LotStatus.RECALLED:
        raise Conflict(
            f"Ingredient lot {lot.internal_lot_code} is already recalled",
            code="LOT_ALREADY_RECALLED",
            details={"ingredient_lot_id": lot.id},
        )
    lot.status = LotStatus.RECALLED
    lot.quality_status = QualityStatus.QUARANTINED
    lot.save(update_fields=["status", "quality_status", "updated_at"])
    return lot


def _recall_runs(run_ids, now) -> list[str]:
    daily_lots = list(
        ProductionRun.objects.select_for_update()
        .filter(pk__in=run_ids)
        .order_by("created_at", "id")
        .values_list("daily_lot", flat=True)
    )
    ProductionRun.objects.filter(pk__in=run_ids).exclude(status=RunStatus.RECALLED).update(
        status=RunStatus.RECALLED,
        updated_at=now,
    )
    return daily_lots


def _recall_pallets(run_ids, now) -> dict:
    pallets = Pallet.objects.filter(production_run_id__in=run_ids)
    shipped = pallets.filter(shipping_status=ShippingStatus.SHIPPED)
    orders = sorted(set(shipped.exclude(customer_order__isnull=True).values_list("customer_order", flat=True)))
    summary = {
        "pallets_recalled": pallets.exclude(shipping_status=ShippingStatus.RECALLED).count(),
        "shipped_pallets_recalled": shipped.count(),
        "customer_orders": [order for order in orders if order],
    }
    pallets.exclude(shipping_status=ShippingStatus.RECALLED).update(
        shipping_status=ShippingStatus.RECALLED,
        updated_at=now,
    )
    return summary


def apply_recall(execution: RecallExecution) -> dict:
    now = timezone.now()
    lot = _recall_lot(execution.ingredient_lot_id)
    run_ids = sorted(set(BatchIngredient.objects.filter(ingredient_lot_id=lot.id).values_list("production_run_id", flat=True)))
    daily_lots = _recall_runs(run_ids, now)
    pallets = _recall_pallets(run_ids, now)
    return {
        "execution_id": execution.id,
        "ingredient_lot_id": lot.id,
        "internal_lot_code": lot.internal_lot_code,
        "status": RecallExecution.Status.COMPLETED.value,
        "reason": execution.reason,
        "executed_by": execution.executed_by,
        "production_runs_recalled": daily_lots,
        **pallets,
        "started_at": execution.started_at,
        "completed_at": now,
    }


def execute_recall(lot_id: int, reason: str, executed_by=None, idempotency_key=None) -> tuple[dict, int]:
    existing = find_completed_execution(lot_id, idempotency_key)
    if existing:
        result = existing.result or {}
        logger.info("Replaying recall execution %s for key %s", existing.id, idempotency_key)
        return result.get("data", {}), result.get("status_code", status.HTTP_200_OK)

    execution = start_execution(lot_id, reason, executed_by, idempotency_key)
    try:
        with transaction.atomic():
            data = apply_recall(execution)
            complete_execution(execution, status.HTTP_201_CREATED, data)
    except ApiError as exc:
        fail_execution(execution, exc.status_code, {"error": str(exc.detail), "code": exc.error_code})
        raise
    except DatabaseError as exc:
        logger.exception("Recall execution %s for ingredient lot %s failed", execution.id, lot_id)
        fail_execution(execution, status.HTTP_500_INTERNAL_SERVER_ERROR, {"message": str(exc)})
        raise ServiceFailure(
            "Failed to execute recall",
            code="RECALL_EXECUTION_ERROR",
            details={"message": str(exc)},
        ) from exc

    logger.info(
        "Recalled ingredient lot %s: %d run(s), %d pallet(s)",
        data["internal_lot_code"],
        len(data["production_runs_recalled"]),
        data["pallets_recalled"],
    )
    return normalize_payload(data), status.HTTP_201_CREATED
