"""Forward trace: everything produced from one ingredient lot."""

from decimal import Decimal

from apps.production.models import ShippingStatus
from apps.traceability.repository import LotLineage, PalletRecord, RunRecord
from apps.traceability.services.payloads import (
    INVENTORY_STATUSES,
    as_timestamp,
    chain_node,
    lot_payload,
    pallet_payload,
    recipe_payload,
    units,
)


def affected_pallets(runs) -> list[tuple[RunRecord, PalletRecord]]:
    seen = {}
    for run in runs:
        for pallet in run.pallets:
            seen.setdefault(pallet.id, (run, pallet))
    return list(seen.values())


def customer_orders(pallets) -> dict[str, list[PalletRecord]]:
    """Shipped pallets grouped by customer order; pallets without an order are skipped."""
    groups: dict[str, list[PalletRecord]] = {}
    for pallet in pallets:
        if pallet.shipping_status == ShippingStatus.SHIPPED and pallet.customer_order:
            groups.setdefault(pallet.customer_order, []).append(pallet)
    return dict(sorted(groups.items()))


def _chain(lineage: LotLineage, used_by_run: dict[int, Decimal]) -> list[dict]:
    lot = lineage.lot
    nodes = [
        chain_node(
            1,
            "ingredient_lot",
            lot.id,
            f"{lot.ingredient.name} (Lot: {lot.internal_lot_code})",
            {
                "lot_code": lot.internal_lot_code,
                "supplier_lot_code": lot.supplier_lot_code,
                "received_date": lot.received_date,
                "quality_status": lot.quality_status,
            },
            lot.received_date,
        )
    ]
    for run in lineage.runs:
        nodes.append(
            chain_node(
                2,
                "production_run",
                run.id,
                f"Production Run {run.daily_lot} ({run.recipe_name})",
                {
                    "daily_lot": run.daily_lot,
                    "recipe_name": run.recipe_name,
                    "quality_status": run.quality_status,
                    "quantity_used": used_by_run.get(run.id, Decimal("0")),
                },
                run.created_at,
            )
        )
        for pallet in run.pallets:
            nodes.append(
                chain_node(
                    3,
                    "pallet",
                    pallet.id,
                    f"Pallet {pallet.pallet_code} ({units(pallet.quantity_packed)})",
                    {
                        "pallet_code": pallet.pallet_code,
                        "shipping_status": pallet.shipping_status,
                        "location": pallet.location,
                        "quantity_packed": pallet.quantity_packed,
                    },
                    pallet.created_at,
                )
            )
    return sorted(nodes, key=lambda node: (node["level"], as_timestamp(node["date"]), node["id"]))


def trace_forward(lineage: LotLineage) -> dict:
    usages_by_run: dict[int, list] = {}
    used_by_run: dict[int, Decimal] = {}
    for usage in lineage.usages:
        usages_by_run.setdefault(usage.run_id, []).append(usage)
        used_by_run[usage.run_id] = used_by_run.get(usage.run_id, Decimal("0")) + usage.quantity_used

    pallets = affected_pallets(lineage.runs)
    pallet_records = [pallet for _, pallet in pallets]
    orders = customer_orders(pallet_records)

    def count(statuses) -> int:
        return sum(1 for pallet in pallet_records if pallet.shipping_status in statuses)

    return {
        "source": {"ingredient_lot": lot_payload(lineage.lot)},
        "impact": {
            "total_production_runs": len(lineage.runs),
            "total_pallets": len(pallet_records),
            "shipped_pallets": count({ShippingStatus.SHIPPED}),
            "inventory_pallets": count(INVENTORY_STATUSES),
            "recalled_pallets": count({ShippingStatus.RECALLED}),
            "total_quantity_produced": sum(run.actual_quantity or run.planned_quantity or 0 for run in lineage.runs),
            "customer_orders_affected": len(orders),
            "customer_impact": [
                {
                    "customer_order": order,
                    "pallets": [pallet.pallet_code for pallet in grouped],
                    "total_quantity": sum(pallet.quantity_packed or 0 for pallet in grouped),
                }
                for order, grouped in orders.items()
            ],
        },
        "production_runs": [
            {
                "id": run.id,
                "daily_lot": run.daily_lot,
                "cake_lot": run.cake_lot,
                "icing_lot": run.icing_lot,
                "status": run.status,
                "quality_status": run.quality_status,
                "planned_quantity": run.planned_quantity,
                "actual_quantity": run.actual_quantity,
                "recipe": recipe_payload(run),
                "quantity_used": used_by_run.get(run.id, Decimal("0")),
                "usage_details": [
                    {
                        "id": usage.id,
                        "quantity_used": usage.quantity_used,
                        "added_at": usage.added_at,
                        "added_by": usage.added_by,
                    }
                    for usage in usages_by_run.get(run.id, [])
                ],
                "pallets_produced": len(run.pallets),
                "pallets": [pallet_payload(pallet) for pallet in run.pallets],
                "created_at": run.created_at,
            }
            for run in lineage.runs
        ],
        "affected_pallets": [
            {
                **pallet_payload(pallet),
                "production_run": {
                    "id": run.id,
                    "daily_lot": run.daily_lot,
                    "quality_status": run.quality_status,
                    "actual_quantity": run.actual_quantity,
                    "created_at": run.created_at,
                },
                "recipe": recipe_payload(run),
            }
            for run, pallet in pallets
        ],
        "traceability_chain": _chain(lineage, used_by_run),
    }
