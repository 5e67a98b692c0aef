"""Recall impact assessment and action plan."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings

from apps.production.models import ShippingStatus
from apps.traceability.repository import LotLineage
from apps.traceability.services.forward import affected_pallets, customer_orders
from apps.traceability.services.payloads import INVENTORY_STATUSES, lot_payload, pallet_payload, recipe_payload
from apps.traceability.services.scoring import regulatory_required, score_recall, urgency_assessment

IMMEDIATE_ACTIONS = [
    "Identify and quarantine all remaining inventory from affected production runs",
    "Contact customers who received shipped products within the last 30 days",
    "Issue recall notices for all affected products",
    "Coordinate with regulatory authorities if required",
]

TIMELINE = {
    "hour_1": "Quarantine remaining inventory and halt production",
    "hour_4": "Complete internal traceability analysis",
    "hour_8": "Begin customer notifications",
    "day_1": "File regulatory notifications if required",
    "day_2": "Complete customer recall notifications",
    "week_1": "Assess effectiveness and recovery plan",
}

STATUS_ORDER = (
    ShippingStatus.PENDING,
    ShippingStatus.ACTIVE,
    ShippingStatus.SHIPPED,
    ShippingStatus.RECALLED,
)


@dataclass(frozen=True)
class RecallPolicy:
    validity_hours: int = 24
    media_alert_shipped_pallets: int = 100
    unit_cost_estimate: int = 10

    @classmethod
    def from_settings(cls) -> "RecallPolicy":
        defaults = cls()
        return cls(
            validity_hours=getattr(settings, "RECALL_ASSESSMENT_VALIDITY_HOURS", defaults.validity_hours),
            media_alert_shipped_pallets=getattr(
                settings, "RECALL_MEDIA_ALERT_SHIPPED_PALLETS", defaults.media_alert_shipped_pallets
            ),
            unit_cost_estimate=getattr(settings, "RECALL_UNIT_COST_ESTIMATE", defaults.unit_cost_estimate),
        )


def customer_impact(orders: dict, run_by_id: dict) -> list[dict]:
    impact = []
    for order, pallets in orders.items():
        shipped_dates = [pallet.shipped_at for pallet in pallets if pallet.shipped_at]
        batches = []
        for pallet in pallets:
            daily_lot = run_by_id[pallet.run_id].daily_lot
            if daily_lot not in batches:
                batches.append(daily_lot)
        impact.append(
            {
                "customer_order": order,
                "pallets": [
                    {
                        "pallet_code": pallet.pallet_code,
                        "quantity": pallet.quantity_packed or 0,
                        "production_batch": run_by_id[pallet.run_id].daily_lot,
                    }
                    for pallet in pallets
                ],
                "total_items": sum(pallet.quantity_packed or 0 for pallet in pallets),
                "shipped_date": min(shipped_dates) if shipped_dates else None,
                "production_runs": batches,
            }
        )
    return impact


def build_action_plan(lineage: LotLineage, policy: RecallPolicy) -> dict:
    pallets = [pallet for _, pallet in affected_pallets(lineage.runs)]
    orders = customer_orders(pallets)
    shipped = [pallet for pallet in pallets if pallet.shipping_status == ShippingStatus.SHIPPED]
    inventory = [pallet for pallet in pallets if pallet.shipping_status in INVENTORY_STATUSES]
    untracked_shipments = [pallet for pallet in shipped if not pallet.customer_order]
    inventory_units = sum(pallet.quantity_packed or 0 for pallet in inventory)

    return {
        "immediate_actions": list(IMMEDIATE_ACTIONS),
        "notifications": {
            "customers": len(orders),
            "customer_orders": list(orders),
            "regulatory_required": regulatory_required(lineage.lot.ingredient),
            "media_required": len(shipped) > policy.media_alert_shipped_pallets,
        },
        "inventory": {
            "active_inventory_pallets": len(inventory),
            "total_pallets_to_quarantine": len(inventory) + len(untracked_shipments),
            "estimated_financial_impact": inventory_units * policy.unit_cost_estimate,
        },
        "timeline": dict(TIMELINE),
    }


def assess_recall(lineage: LotLineage, now: datetime, policy: RecallPolicy | None = None) -> dict:
    policy = policy or RecallPolicy()
    runs = lineage.runs
    run_by_id = {run.id: run for run in runs}
    pallets = affected_pallets(runs)
    pallet_records = [pallet for _, pallet in pallets]
    orders = customer_orders(pallet_records)

    by_status: dict[str, list] = {}
    for run, pallet in pallets:
        by_status.setdefault(pallet.shipping_status, []).append(
            {
                **pallet_payload(pallet),
                "production_run": {
                    "id": run.id,
                    "daily_lot": run.daily_lot,
                    "recipe_name": run.recipe_name,
                    "created_at": run.created_at,
                },
            }
        )

    shipped_count = len(by_status.get(ShippingStatus.SHIPPED, []))
    inventory_count = sum(len(by_status.get(status, [])) for status in INVENTORY_STATUSES)
    used_by_run: dict[int, list] = {}
    for usage in lineage.usages:
        used_by_run.setdefault(usage.run_id, []).append(usage)

    return {
        "recall_target": {"ingredient_lot": lot_payload(lineage.lot)},
        "impact_summary": {
            "total_production_runs": len(runs),
            "total_pallets_affected": len(pallet_records),
            "shipped_products": shipped_count,
            "active_inventory": inventory_count,
            "recalled_pallets": len(by_status.get(ShippingStatus.RECALLED, [])),
            "customers_affected": len(orders),
            "earliest_production": min((run.created_at for run in runs), default=None),
            "latest_production": max((run.created_at for run in runs), default=None),
        },
        "affected_production_runs": [
            {
                "id": run.id,
                "daily_lot": run.daily_lot,
                "recipe": recipe_payload(run),
                "status": run.status,
                "quality_status": run.quality_status,
                "actual_quantity": run.actual_quantity,
                "usage_details": [
                    {"quantity_used": usage.quantity_used, "added_at": usage.added_at, "added_by": usage.added_by}
                    for usage in used_by_run.get(run.id, [])
                ],
                "pallets": [pallet_payload(pallet) for pallet in run.pallets],
                "created_at": run.created_at,
            }
            for run in runs
        ],
        "pallets_by_status": [
            {
                "status": status.value,
                "count": len(by_status[status]),
                "total_quantity": sum(pallet["quantity_packed"] or 0 for pallet in by_status[status]),
                "pallets": by_status[status],
            }
            for status in STATUS_ORDER
            if status in by_status
        ],
        "customer_impact": customer_impact(orders, run_by_id),
        "urgency_assessment": urgency_assessment(runs, now),
        "risk_assessment": score_recall(len(orders), shipped_count, runs, lineage.lot.ingredient, now),
        "action_plan": build_action_plan(lineage, policy),
        "generated_at": now,
        "expires_at": now + timedelta(hours=policy.validity_hours),
    }
