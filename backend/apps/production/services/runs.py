from __future__ import annotations

import logging
from typing import Any

from django.db import transaction
from django.utils import timezone

from apps.core.api.exceptions import ApiError, Conflict, OperationForbidden
from apps.production.models import Pallet, ProductionRun, RunStatus, ShippingStatus
from apps.production.services.consumption import release_lots

logger = logging.getLogger(__name__)

QUALITY_FIELDS = {"quality_status", "quality_notes"}

ALLOWED_TRANSITIONS = {
    RunStatus.PLANNED: {RunStatus.IN_PROGRESS, RunStatus.FAILED},
    RunStatus.IN_PROGRESS: {RunStatus.COMPLETED, RunStatus.FAILED},
    RunStatus.COMPLETED: set(),
    RunStatus.FAILED: set(),
    RunStatus.RECALLED: set(),
}


def update_run(run: ProductionRun, data: dict[str, Any]) -> ProductionRun:
    if run.is_locked:
        disallowed = sorted(field for field in data if field not in QUALITY_FIELDS)
        if disallowed:
            raise OperationForbidden(
                f"Cannot update production run with quality status: {run.quality_status}",
                code="UPDATE_FORBIDDEN",
                details={
                    "status": run.status,
                    "quality_status": run.quality_status,
                    "allowed_fields": sorted(QUALITY_FIELDS),
                    "attempted_fields": sorted(data),
                },
            )

    new_status = data.get("status")
    if new_status and new_status != run.status and new_status not in ALLOWED_TRANSITIONS[run.status]:
        raise Conflict(
            f"Cannot move production run from {run.status} to {new_status}",
            code="INVALID_STATUS_TRANSITION",
            details={"from": run.status, "to": new_status},
        )

    start_time = data.get("start_time", run.start_time)
    end_time = data.get("end_time", run.end_time)
    if start_time and end_time and end_time <= start_time:
        raise ApiError(
            "End time must be after start time",
            code="INVALID_TIME_RANGE",
            details={"start_time": start_time.isoformat(), "end_time": end_time.isoformat()},
        )

    for field, value in data.items():
        setattr(run, field, value)
    run.save()
    return run


def delete_run(run: ProductionRun) -> None:
    if run.is_locked:
        raise OperationForbidden(
            "Cannot delete completed production run",
            code="DELETE_FORBIDDEN",
            details={"status": run.status, "quality_status": run.quality_status, "daily_lot": run.daily_lot},
        )

    shipped = run.pallets.filter(shipping_status=ShippingStatus.SHIPPED).count()
    if shipped:
        raise OperationForbidden(
            "Cannot delete production run with shipped pallets",
            code="DELETE_FORBIDDEN",
            details={"daily_lot": run.daily_lot, "shipped_pallets": shipped},
        )

    with transaction.atomic():
        lot_ids = list(run.batch_ingredients.values_list("ingredient_lot_id", flat=True))
        daily_lot = run.daily_lot
        run.delete()
        release_lots(lot_ids)

    logger.info("Deleted production run %s and released %d lot(s)", daily_lot, len(set(lot_ids)))


def ship_pallet(pallet: Pallet, customer_order: str, shipped_at=None) -> Pallet:
    if pallet.shipping_status not in {ShippingStatus.PENDING, ShippingStatus.ACTIVE}:
        raise Conflict(
            f"Cannot ship pallet with shipping status: {pallet.shipping_status}",
            code="PALLET_NOT_SHIPPABLE",
            details={"pallet_id": pallet.id, "shipping_status": pallet.shipping_status},
        )
    pallet.shipping_status = ShippingStatus.SHIPPED
    pallet.customer_order = customer_order
    pallet.shipped_at = shipped_at or timezone.now()
    pallet.save(update_fields=["shipping_status", "customer_order", "shipped_at", "updated_at"])
    logger.info("Shipped pallet %s on order %s", pallet.pallet_code, customer_order)
    return pallet
