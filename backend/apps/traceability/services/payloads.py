from datetime import date, datetime, time, timezone as dt_timezone

from apps.production.models import ShippingStatus
from apps.traceability.repository import IngredientRecord, LotRecord, PalletRecord, RunRecord

INVENTORY_STATUSES = {ShippingStatus.PENDING, ShippingStatus.ACTIVE}


def as_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=dt_timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=dt_timezone.utc)
    raise TypeError(f"Unsupported chain timestamp: {value!r}")


def ingredient_payload(ingredient: IngredientRecord) -> dict:
    return {
        "id": ingredient.id,
        "name": ingredient.name,
        "supplier_name": ingredient.supplier_name,
        "storage_type": ingredient.storage_type,
        "allergens": list(ingredient.allergens),
    }


def lot_payload(lot: LotRecord) -> dict:
    return {
        "id": lot.id,
        "internal_lot_code": lot.internal_lot_code,
        "supplier_lot_code": lot.supplier_lot_code,
        "supplier_name": lot.supplier_name,
        "ingredient": ingredient_payload(lot.ingredient),
        "received_date": lot.received_date,
        "expiration_date": lot.expiration_date,
        "quality_status": lot.quality_status,
        "status": lot.status,
    }


def recipe_payload(run: RunRecord) -> dict:
    return {"id": run.recipe_id, "name": run.recipe_name, "version": run.recipe_version}


def pallet_payload(pallet: PalletRecord) -> dict:
    return {
        "id": pallet.id,
        "pallet_code": pallet.pallet_code,
        "quantity_packed": pallet.quantity_packed,
        "location": pallet.location,
        "shipping_status": pallet.shipping_status,
        "packing_date": pallet.packing_date,
        "expiration_date": pallet.expiration_date,
        "shipped_at": pallet.shipped_at,
        "customer_order": pallet.customer_order,
        "created_at": pallet.created_at,
    }


def chain_node(level: int, node_type: str, node_id: int, description: str, details: dict, timestamp) -> dict:
    return {
        "level": level,
        "type": node_type,
        "id": node_id,
        "description": description,
        "details": details,
        "date": timestamp,
    }


def units(quantity) -> str:
    return f"{quantity} units" if quantity is not None else "N/A units"
