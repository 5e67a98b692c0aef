"""Read-only access to the lot -> usage -> run -> pallet lineage.

Tracers only ever see the immutable records defined here, so they can be
exercised against an in-memory repository without a database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol

from django.db.models import Prefetch

from apps.inventory.models import IngredientLot
from apps.production.models import BatchIngredient, Pallet, ProductionRun


@dataclass(frozen=True)
class IngredientRecord:
    id: int
    name: str
    supplier_name: Optional[str] = None
    supplier_code: Optional[str] = None
    storage_type: str = "dry"
    allergens: tuple[str, ...] = ()


@dataclass(frozen=True)
class LotRecord:
    id: int
    internal_lot_code: str
    ingredient: IngredientRecord
    supplier_name: str
    received_date: date
    quantity_received: Decimal
    quantity_remaining: Decimal
    quality_status: str = "pending"
    status: str = "active"
    supplier_lot_code: Optional[str] = None
    expiration_date: Optional[date] = None
    manufacture_date: Optional[date] = None


@dataclass(frozen=True)
class PalletRecord:
    id: int
    run_id: int
    pallet_code: str
    created_at: datetime
    shipping_status: str = "pending"
    quantity_packed: Optional[int] = None
    location: Optional[str] = None
    packing_date: Optional[date] = None
    expiration_date: Optional[date] = None
    shipped_at: Optional[datetime] = None
    customer_order: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class RunRecord:
    id: int
    daily_lot: str
    recipe_id: int
    recipe_name: str
    planned_quantity: int
    created_at: datetime
    recipe_version: str = ""
    recipe_description: Optional[str] = None
    cake_lot: Optional[str] = None
    icing_lot: Optional[str] = None
    status: str = "planned"
    quality_status: str = "pending"
    actual_quantity: Optional[int] = None
    primary_operator: Optional[str] = None
    pallets: tuple[PalletRecord, ...] = ()


@dataclass(frozen=True)
class UsageRecord:
    id: int
    run_id: int
    lot: LotRecord
    quantity_used: Decimal
    added_at: datetime
    added_by: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class LotLineage:
    lot: LotRecord
    usages: tuple[UsageRecord, ...] = ()
    runs: tuple[RunRecord, ...] = ()


@dataclass(frozen=True)
class PalletLineage:
    pallet: PalletRecord
    run: RunRecord
    usages: tuple[UsageRecord, ...] = ()


class TraceabilityRepository(Protocol):
    def get_lot(self, lot_id: int) -> Optional[LotRecord]: ...

    def get_lot_with_usages(self, lot_id: int) -> Optional[LotLineage]: ...

    def get_pallet_with_lineage(self, pallet_id: int) -> Optional[PalletLineage]: ...


def ingredient_record(ingredient) -> IngredientRecord:
    return IngredientRecord(
        id=ingredient.id,
        name=ingredient.name,
        supplier_name=ingredient.supplier.name if ingredient.supplier_id else None,
        supplier_code=ingredient.supplier_code,
        storage_type=ingredient.storage_type,
        allergens=tuple(ingredient.allergens or ()),
    )


def lot_record(lot: IngredientLot) -> LotRecord:
    return LotRecord(
        id=lot.id,
        internal_lot_code=lot.internal_lot_code,
        supplier_lot_code=lot.supplier_lot_code,
        ingredient=ingredient_record(lot.ingredient),
        supplier_name=lot.supplier.name,
        received_date=lot.received_date,
        expiration_date=lot.expiration_date,
        manufacture_date=lot.manufacture_date,
        quantity_received=lot.quantity_received,
        quantity_remaining=lot.quantity_remaining,
        quality_status=lot.quality_status,
        status=lot.status,
    )


def pallet_record(pallet: Pallet) -> PalletRecord:
    return PalletRecord(
        id=pallet.id,
        run_id=pallet.production_run_id,
        pallet_code=pallet.pallet_code,
        quantity_packed=pallet.quantity_packed,
        location=pallet.location,
        shipping_status=pallet.shipping_status,
        packing_date=pallet.packing_date,
        expiration_date=pallet.expiration_date,
        shipped_at=pallet.shipped_at,
        customer_order=pallet.customer_order,
        notes=pallet.notes,
        created_at=pallet.created_at,
    )


def run_record(run: ProductionRun, pallets=()) -> RunRecord:
    return RunRecord(
        id=run.id,
        daily_lot=run.daily_lot,
        cake_lot=run.cake_lot,
        icing_lot=run.icing_lot,
        recipe_id=run.recipe_id,
        recipe_name=run.recipe.name,
        recipe_version=run.recipe.version,
        recipe_description=run.recipe.description,
        status=run.status,
        quality_status=run.quality_status,
        planned_quantity=run.planned_quantity,
        actual_quantity=run.actual_quantity,
        primary_operator=run.primary_operator,
        created_at=run.created_at,
        pallets=tuple(pallet_record(pallet) for pallet in pallets),
    )


def usage_record(usage: BatchIngredient, lot: LotRecord) -> UsageRecord:
    return UsageRecord(
        id=usage.id,
        run_id=usage.production_run_id,
        lot=lot,
        quantity_used=usage.quantity_used,
        added_at=usage.added_at,
        added_by=usage.added_by,
        notes=usage.notes,
    )


class DjangoTraceabilityRepository:
    lot_relations = ("ingredient", "ingredient__supplier", "supplier")

    def _load_lot(self, lot_id: int) -> Optional[IngredientLot]:
        return IngredientLot.objects.select_related(*self.lot_relations).filter(pk=lot_id).first()

    def get_lot(self, lot_id: int) -> Optional[LotRecord]:
        lot = self._load_lot(lot_id)
        return lot_record(lot) if lot else None

    def get_lot_with_usages(self, lot_id: int) -> Optional[LotLineage]:
        lot = self._load_lot(lot_id)
        if lot is None:
            return None

        record = lot_record(lot)
        usages = BatchIngredient.objects.filter(ingredient_lot_id=lot_id).order_by("added_at", "id")
        runs = (
            ProductionRun.objects.filter(batch_ingredients__ingredient_lot_id=lot_id)
            .distinct()
            .select_related("recipe")
            .prefetch_related(Prefetch("pallets", queryset=Pallet.objects.order_by("created_at", "id")))
            .order_by("created_at", "id")
        )
        return LotLineage(
            lot=record,
            usages=tuple(usage_record(usage, record) for usage in usages),
            runs=tuple(run_record(run, run.pallets.all()) for run in runs),
        )

    def get_pallet_with_lineage(self, pallet_id: int) -> Optional[PalletLineage]:
        pallet = Pallet.objects.select_related("production_run__recipe").filter(pk=pallet_id).first()
        if pallet is None:
            return None

        usages = (
            BatchIngredient.objects.filter(production_run_id=pallet.production_run_id)
            .select_related(*(f"ingredient_lot__{name}" for name in self.lot_relations))
            .order_by("added_at", "id")
        )
        lots: dict[int, LotRecord] = {}
        records = []
        for usage in usages:
            if usage.ingredient_lot_id not in lots:
                lots[usage.ingredient_lot_id] = lot_record(usage.ingredient_lot)
            records.append(usage_record(usage, lots[usage.ingredient_lot_id]))

        return PalletLineage(
            pallet=pallet_record(pallet),
            run=run_record(pallet.production_run),
            usages=tuple(records),
        )
