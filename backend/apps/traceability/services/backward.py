"""Backward trace: every ingredient lot embedded in one pallet."""

from datetime import date, timedelta
from decimal import Decimal

from django.conf import settings

from apps.inventory.models import LotStatus, QualityStatus
from apps.traceability.repository import LotRecord, PalletLineage, UsageRecord
from apps.traceability.services.payloads import (
    as_timestamp,
    chain_node,
    ingredient_payload,
    pallet_payload,
    recipe_payload,
)

DEFAULT_NEAR_EXPIRATION_DAYS = 30

CRITICAL = "CRITICAL"
HIGH = "HIGH"
MEDIUM = "MEDIUM"


def near_expiration_days() -> int:
    return getattr(settings, "TRACEABILITY_NEAR_EXPIRATION_DAYS", DEFAULT_NEAR_EXPIRATION_DAYS)


def lots_with_usages(usages) -> list[tuple[LotRecord, list[UsageRecord]]]:
    grouped: dict[int, tuple[LotRecord, list[UsageRecord]]] = {}
    for usage in usages:
        grouped.setdefault(usage.lot.id, (usage.lot, []))[1].append(usage)
    return list(grouped.values())


def risk_factors(lot: LotRecord, today: date, window_days: int) -> list[dict]:
    label = f"{lot.ingredient.name} (Lot {lot.internal_lot_code})"
    factors = []
    if lot.expiration_date:
        if lot.expiration_date <= today:
            factors.append(
                {"type": "EXPIRED_INGREDIENT", "severity": HIGH, "description": f"{label} is expired"}
            )
        elif lot.expiration_date <= today + timedelta(days=window_days):
            factors.append(
                {
                    "type": "NEAR_EXPIRATION",
                    "severity": MEDIUM,
                    "description": f"{label} expires within {window_days} days",
                }
            )
    if lot.quality_status == QualityStatus.FAILED:
        factors.append({"type": "QUALITY_FAILURE", "severity": CRITICAL, "description": f"{label} failed quality checks"})
    if lot.status == LotStatus.RECALLED:
        factors.append({"type": "RECALLED_INGREDIENT", "severity": CRITICAL, "description": f"{label} has been recalled"})
    if lot.ingredient.allergens:
        factors.append(
            {
                "type": "ALLERGEN_PRESENT",
                "severity": MEDIUM,
                "description": f"{lot.ingredient.name} contains allergens: {', '.join(lot.ingredient.allergens)}",
                "allergens": list(lot.ingredient.allergens),
            }
        )
    for factor in factors:
        factor["ingredient_lot_id"] = lot.id
    return factors


def supplier_analysis(lots) -> list[dict]:
    suppliers: dict[str, dict] = {}
    for lot, usages in lots:
        used = sum((usage.quantity_used for usage in usages), Decimal("0"))
        entry = suppliers.setdefault(
            lot.supplier_name,
            {
                "supplier_name": lot.supplier_name,
                "ingredients_supplied": [],
                "total_quantity_used": Decimal("0"),
                "lot_count": 0,
                "quality_issues": 0,
            },
        )
        entry["ingredients_supplied"].append(
            {
                "name": lot.ingredient.name,
                "lot_code": lot.internal_lot_code,
                "quantity_used": used,
                "quality_status": lot.quality_status,
            }
        )
        entry["total_quantity_used"] += used
        entry["lot_count"] += 1
        if lot.quality_status in {QualityStatus.FAILED, QualityStatus.QUARANTINED}:
            entry["quality_issues"] += 1
    return list(suppliers.values())


def _chain(lineage: PalletLineage, lots) -> list[dict]:
    pallet = lineage.pallet
    run = lineage.run
    nodes = [
        chain_node(
            1,
            "pallet",
            pallet.id,
            f"Pallet {pallet.pallet_code}",
            {
                "pallet_code": pallet.pallet_code,
                "quantity_packed": pallet.quantity_packed,
                "shipping_status": pallet.shipping_status,
                "location": pallet.location,
                "packing_date": pallet.packing_date,
                "expiration_date": pallet.expiration_date,
                "customer_order": pallet.customer_order,
            },
            pallet.created_at,
        ),
        chain_node(
            2,
            "production_run",
            run.id,
            f"Production Run {run.daily_lot} ({run.recipe_name})",
            {
                "daily_lot": run.daily_lot,
                "cake_lot": run.cake_lot,
                "icing_lot": run.icing_lot,
                "recipe_name": run.recipe_name,
                "quality_status": run.quality_status,
                "planned_quantity": run.planned_quantity,
                "actual_quantity": run.actual_quantity,
                "primary_operator": run.primary_operator,
            },
            run.created_at,
        ),
    ]
    for lot, usages in lots:
        used = sum((usage.quantity_used for usage in usages), Decimal("0"))
        nodes.append(
            chain_node(
                3,
                "ingredient_lot",
                lot.id,
                f"{lot.ingredient.name} - Lot {lot.internal_lot_code} ({used} units)",
                {
                    "ingredient_name": lot.ingredient.name,
                    "storage_type": lot.ingredient.storage_type,
                    "lot_code": lot.internal_lot_code,
                    "supplier_name": lot.supplier_name,
                    "quantity_used": used,
                    "received_date": lot.received_date,
                    "expiration_date": lot.expiration_date,
                    "quality_status": lot.quality_status,
                },
                lot.received_date,
            )
        )
    # newest first within a level
    return sorted(nodes, key=lambda node: (node["level"], -as_timestamp(node["date"]).timestamp(), node["id"]))


def trace_backward(lineage: PalletLineage, today: date, window_days: int | None = None) -> dict:
    if window_days is None:
        window_days = near_expiration_days()

    run = lineage.run
    lots = lots_with_usages(lineage.usages)
    factors = [factor for lot, _ in lots for factor in risk_factors(lot, today, window_days)]
    suppliers = supplier_analysis(lots)

    def severity_count(severity: str) -> int:
        return sum(1 for factor in factors if factor["severity"] == severity)

    def quality_count(quality_status: str) -> int:
        return sum(1 for lot, _ in lots if lot.quality_status == quality_status)

    return {
        "target": {
            "pallet": pallet_payload(lineage.pallet),
            "production_run": {
                "id": run.id,
                "daily_lot": run.daily_lot,
                "cake_lot": run.cake_lot,
                "icing_lot": run.icing_lot,
                "status": run.status,
                "quality_status": run.quality_status,
                "actual_quantity": run.actual_quantity,
                "primary_operator": run.primary_operator,
                "created_at": run.created_at,
                "recipe": {**recipe_payload(run), "description": run.recipe_description},
            },
        },
        "ingredient_lots": [
            {
                "id": lot.id,
                "internal_lot_code": lot.internal_lot_code,
                "supplier_lot_code": lot.supplier_lot_code,
                "supplier_name": lot.supplier_name,
                "ingredient": ingredient_payload(lot.ingredient),
                "received_date": lot.received_date,
                "expiration_date": lot.expiration_date,
                "manufacture_date": lot.manufacture_date,
                "quality_status": lot.quality_status,
                "status": lot.status,
                "quantity_used": sum((usage.quantity_used for usage in usages), Decimal("0")),
                "usage_details": [
                    {
                        "id": usage.id,
                        "quantity_used": usage.quantity_used,
                        "added_at": usage.added_at,
                        "added_by": usage.added_by,
                        "notes": usage.notes,
                    }
                    for usage in usages
                ],
            }
            for lot, usages in lots
        ],
        "traceability_chain": _chain(lineage, lots),
        "supplier_analysis": suppliers,
        "risk_assessment": {
            "total_risk_factors": len(factors),
            "critical_issues": severity_count(CRITICAL),
            "high_issues": severity_count(HIGH),
            "medium_issues": severity_count(MEDIUM),
            "risk_factors": factors,
        },
        "summary": {
            "total_ingredient_lots": len(lots),
            "total_suppliers": len(suppliers),
            "quality_passed_lots": quality_count(QualityStatus.PASSED),
            "quality_failed_lots": quality_count(QualityStatus.FAILED),
            "quality_pending_lots": quality_count(QualityStatus.PENDING),
            "quality_quarantined_lots": quality_count(QualityStatus.QUARANTINED),
            "recalled_lots": sum(1 for lot, _ in lots if lot.status == LotStatus.RECALLED),
        },
    }
