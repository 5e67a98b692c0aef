"""Recall risk score and urgency buckets.

Every component is normalised to 0-100 and the weighted total is rounded
half up, so the score only ever grows with shipped pallets or customer
orders when everything else is held fixed.
"""

from datetime import datetime

from apps.production.models import ShippingStatus
from apps.traceability.repository import IngredientRecord, RunRecord
from apps.traceability.services.payloads import INVENTORY_STATUSES

# percent weights, summing to 100
WEIGHTS = {
    "customer_exposure": 30,
    "volume_impact": 25,
    "time_urgency": 20,
    "allergen_risk": 15,
    "regulatory_risk": 10,
}

REGULATED_ALLERGENS = {"nuts", "wheat"}

RISK_LEVELS = (
    (80, "CRITICAL"),
    (60, "HIGH"),
    (40, "MEDIUM"),
)

RECOMMENDED_ACTIONS = {
    "CRITICAL": ["IMMEDIATE_RECALL", "REGULATORY_NOTIFICATION", "MEDIA_ALERT"],
    "HIGH": ["CONTROLLED_RECALL", "CUSTOMER_NOTIFICATION"],
    "MEDIUM": ["INVENTORY_QUARANTINE", "INTERNAL_INVESTIGATION"],
    "LOW": ["INVENTORY_QUARANTINE", "INTERNAL_INVESTIGATION"],
}


def days_since(moment: datetime, now: datetime) -> int:
    return max(0, (now - moment).days)


def regulatory_required(ingredient: IngredientRecord) -> bool:
    return ingredient.storage_type == "refrigerated" or bool(REGULATED_ALLERGENS & set(ingredient.allergens))


def risk_components(
    customer_orders: int,
    shipped_pallets: int,
    days_since_production: int | None,
    ingredient: IngredientRecord,
) -> dict[str, int]:
    if days_since_production is None:
        time_urgency = 0
    else:
        time_urgency = max(0, 100 - 2 * days_since_production)
    return {
        "customer_exposure": min(customer_orders * 10, 100),
        "volume_impact": min(shipped_pallets * 5, 100),
        "time_urgency": time_urgency,
        "allergen_risk": 50 if ingredient.allergens else 0,
        "regulatory_risk": 75 if regulatory_required(ingredient) else 25,
    }


def total_risk_score(components: dict[str, int]) -> int:
    weighted = sum(components[name] * weight for name, weight in WEIGHTS.items())
    return (weighted + 50) // 100


def risk_level(score: int) -> str:
    for threshold, level in RISK_LEVELS:
        if score >= threshold:
            return level
    return "LOW"


def recommended_actions(level: str) -> list[str]:
    return list(RECOMMENDED_ACTIONS[level])


def most_recent_production_age(runs, now: datetime) -> int | None:
    if not runs:
        return None
    return min(days_since(run.created_at, now) for run in runs)


def urgency_assessment(runs: tuple[RunRecord, ...], now: datetime) -> dict[str, list[dict]]:
    buckets = {"immediate_action": [], "high_priority": [], "medium_priority": [], "low_priority": []}
    for run in runs:
        age = days_since(run.created_at, now)
        shipped = sum(1 for pallet in run.pallets if pallet.shipping_status == ShippingStatus.SHIPPED)
        active = sum(1 for pallet in run.pallets if pallet.shipping_status in INVENTORY_STATUSES)
        item = {
            "production_run_id": run.id,
            "daily_lot": run.daily_lot,
            "recipe_name": run.recipe_name,
            "days_since_production": age,
            "total_pallets": len(run.pallets),
            "shipped_pallets": shipped,
            "active_pallets": active,
            "created_at": run.created_at,
        }
        if shipped and age <= 7:
            buckets["immediate_action"].append(item)
        elif shipped and age <= 30:
            buckets["high_priority"].append(item)
        elif active:
            buckets["medium_priority"].append(item)
        else:
            buckets["low_priority"].append(item)
    return buckets


def score_recall(customer_orders: int, shipped_pallets: int, runs, ingredient: IngredientRecord, now: datetime) -> dict:
    components = risk_components(
        customer_orders,
        shipped_pallets,
        most_recent_production_age(runs, now),
        ingredient,
    )
    score = total_risk_score(components)
    level = risk_level(score)
    return {
        "total_risk_score": score,
        "risk_level": level,
        "risk_factors": components,
        "recommended_actions": recommended_actions(level),
    }
