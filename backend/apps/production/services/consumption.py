"""Write path for batch usage links.

The remaining quantity of a lot is always recomputed from its usage rows
inside the same transaction that changes them, so it cannot drift from
``quantity_received - sum(quantity_used)``.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.core.api.exceptions import Conflict, ResourceNotFound
from apps.inventory.models import IngredientLot, LotStatus
from apps.production.models import BatchIngredient, ProductionRun, RunStatus

logger = logging.getLogger(__name__)

CONSUMING_RUN_STATUSES = {RunStatus.PLANNED, RunStatus.IN_PROGRESS}


def used_quantity(lot_id: int) -> Decimal:
    total = BatchIngredient.objects.filter(ingredient_lot_id=lot_id).aggregate(total=Sum("quantity_used"))["total"]
    return total or Decimal("0")


def sync_remaining_quantity(lot: IngredientLot) -> IngredientLot:
    """Recompute ``quantity_remaining`` from the usage rows. Caller holds the row lock."""
    remaining = lot.quantity_received - used_quantity(lot.id)
    lot.quantity_remaining = remaining
    update_fields = ["quantity_remaining", "updated_at"]
    if lot.status != LotStatus.RECALLED:
        lot.status = LotStatus.DEPLETED if remaining <= 0 else LotStatus.ACTIVE
        update_fields.append("status")
    lot.save(update_fields=update_fields)
    return lot


def release_lots(lot_ids: Iterable[int]) -> None:
    for lot in IngredientLot.objects.select_for_update().filter(pk__in=set(lot_ids)).order_by("pk"):
        sync_remaining_quantity(lot)


def record_batch_usage(
    run: ProductionRun,
    ingredient_lot_id: int,
    quantity_used: Decimal,
    added_by: str | None = None,
    notes: str | None = None,
) -> BatchIngredient:
    if run.status not in CONSUMING_RUN_STATUSES:
        raise Conflict(
            f"Cannot add ingredients to a production run with status: {run.status}",
            code="RUN_NOT_ACCEPTING_INGREDIENTS",
            details={"production_run_id": run.id, "status": run.status},
        )

    with transaction.atomic():
        try:
            lot = IngredientLot.objects.select_for_update().get(pk=ingredient_lot_id)
        except IngredientLot.DoesNotExist as exc:
            raise ResourceNotFound(
                "Ingredient lot not found",
                details={"ingredient_lot_id": ingredient_lot_id},
            ) from exc

        if not lot.is_usable:
            logger.warning(
                "Rejected usage of lot %s on run %s: status=%s quality=%s",
                lot.internal_lot_code,
                run.daily_lot,
                lot.status,
                lot.quality_status,
            )
            raise Conflict(
                f"Ingredient lot {lot.internal_lot_code} cannot be used",
                code="LOT_NOT_USABLE",
                details={"ingredient_lot_id": lot.id, "status": lot.status, "quality_status": lot.quality_status},
            )

        available = lot.quantity_received - used_quantity(lot.id)
        if quantity_used > available:
            logger.warning(
                "Rejected usage of %s from lot %s on run %s: only %s remaining",
                quantity_used,
                lot.internal_lot_code,
                run.daily_lot,
                available,
            )
            raise Conflict(
                "Not enough quantity remaining on the ingredient lot",
                code="INSUFFICIENT_QUANTITY",
                details={
                    "ingredient_lot_id": lot.id,
                    "requested": str(quantity_used),
                    "remaining": str(available),
                },
            )

        usage = BatchIngredient.objects.create(
            production_run=run,
            ingredient_lot=lot,
            quantity_used=quantity_used,
            added_at=timezone.now(),
            added_by=added_by,
            notes=notes,
        )
        sync_remaining_quantity(lot)

    logger.info("Recorded %s of lot %s on run %s", quantity_used, lot.internal_lot_code, run.daily_lot)
    return usage
