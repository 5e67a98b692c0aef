from dataclasses import replace
from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

from apps.traceability.repository import (
    IngredientRecord,
    LotLineage,
    LotRecord,
    PalletLineage,
    PalletRecord,
    RunRecord,
    UsageRecord,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=dt_timezone.utc)


class InMemoryTraceabilityRepository:
    def __init__(self):
        self.lots: dict[int, LotRecord] = {}
        self.runs: dict[int, RunRecord] = {}
        self.usages: list[UsageRecord] = []

    def add_lot(self, lot_id, code, ingredient_name="Premium Flour", allergens=(), storage_type="dry", **fields):
        ingredient = IngredientRecord(
            id=lot_id,
            name=ingredient_name,
            supplier_name=fields.get("supplier_name", "Flour Supplier A"),
            storage_type=storage_type,
            allergens=tuple(allergens),
        )
        values = {
            "supplier_name": "Flour Supplier A",
            "received_date": date(2024, 8, 1),
            "quantity_received": Decimal("500.000"),
            "quantity_remaining": Decimal("500.000"),
            "quality_status": "passed",
        }
        values.update(fields)
        lot = LotRecord(id=lot_id, internal_lot_code=code, ingredient=ingredient, **values)
        self.lots[lot_id] = lot
        return lot

    def add_run(self, run_id, daily_lot, created_at, recipe_name="Vanilla Cake", **fields):
        values = {"planned_quantity": 100, "status": "completed", "quality_status": "passed"}
        values.update(fields)
        run = RunRecord(
            id=run_id,
            daily_lot=daily_lot,
            recipe_id=1,
            recipe_name=recipe_name,
            recipe_version="1",
            created_at=created_at,
            **values,
        )
        self.runs[run_id] = run
        return run

    def add_pallet(self, pallet_id, run_id, code, created_at, shipping_status="pending", **fields):
        pallet = PalletRecord(
            id=pallet_id,
            run_id=run_id,
            pallet_code=code,
            created_at=created_at,
            shipping_status=shipping_status,
            **fields,
        )
        run = self.runs[run_id]
        self.runs[run_id] = replace(run, pallets=run.pallets + (pallet,))
        return pallet

    def add_usage(self, usage_id, run_id, lot_id, quantity, added_at=None):
        usage = UsageRecord(
            id=usage_id,
            run_id=run_id,
            lot=self.lots[lot_id],
            quantity_used=Decimal(quantity),
            added_at=added_at or self.runs[run_id].created_at,
        )
        self.usages.append(usage)
        return usage

    def get_lot(self, lot_id):
        return self.lots.get(lot_id)

    def get_lot_with_usages(self, lot_id):
        lot = self.lots.get(lot_id)
        if lot is None:
            return None
        usages = [usage for usage in self.usages if usage.lot.id == lot_id]
        run_ids = {usage.run_id for usage in usages}
        runs = sorted((self.runs[run_id] for run_id in run_ids), key=lambda run: (run.created_at, run.id))
        return LotLineage(lot=lot, usages=tuple(usages), runs=tuple(runs))

    def get_pallet_with_lineage(self, pallet_id):
        for run in self.runs.values():
            for pallet in run.pallets:
                if pallet.id == pallet_id:
                    usages = tuple(usage for usage in self.usages if usage.run_id == run.id)
                    return PalletLineage(pallet=pallet, run=run, usages=usages)
        return None


def flour_scenario() -> InMemoryTraceabilityRepository:
    """Flour lot used by a cake run (pallet in stock) and a cupcake run (pallet shipped)."""
    repository = InMemoryTraceabilityRepository()
    repository.add_lot(1, "FLOUR-SUPPLIER-A-001", allergens=("wheat",), supplier_lot_code="FSA-240801-001")
    repository.add_lot(
        2,
        "SUGAR-CO-014",
        ingredient_name="Caster Sugar",
        supplier_name="Sugar Co",
        received_date=date(2024, 8, 5),
        expiration_date=date(2024, 8, 24),
    )
    repository.add_lot(
        3,
        "EGGS-FARM-007",
        ingredient_name="Free Range Eggs",
        allergens=("eggs",),
        storage_type="refrigerated",
        supplier_name="Egg Farm",
        received_date=date(2024, 8, 10),
        expiration_date=date(2024, 8, 13),
        quality_status="failed",
    )

    repository.add_run(10, "CAKE-20240814-001", utc(2024, 8, 14, 6, 0), actual_quantity=96)
    repository.add_run(11, "CUPCAKE-20240814-001", utc(2024, 8, 14, 8, 0), recipe_name="Vanilla Cupcake")
    repository.add_pallet(100, 10, "CAKE-PAL-001", utc(2024, 8, 14, 10, 0), shipping_status="active", quantity_packed=48)
    repository.add_pallet(
        101,
        11,
        "CUPCAKE-PAL-001",
        utc(2024, 8, 14, 11, 0),
        shipping_status="shipped",
        quantity_packed=120,
        customer_order="CO-2024-001",
        shipped_at=utc(2024, 8, 14, 15, 0),
    )

    repository.add_usage(1000, 10, 1, "25.000")
    repository.add_usage(1001, 11, 1, "15.000")
    repository.add_usage(1002, 11, 2, "8.000")
    repository.add_usage(1003, 11, 3, "2.000")
    repository.add_usage(1004, 11, 3, "1.500", added_at=utc(2024, 8, 14, 9, 0))
    return repository
