import re

from apps.core.api.exceptions import InvalidId, ResourceNotFound
from apps.traceability.repository import LotLineage, LotRecord, PalletLineage, TraceabilityRepository

DIGITS = re.compile(r"[0-9]+")
MAX_IDENTIFIER = 2**63 - 1


def parse_identifier(raw, field: str, label: str) -> int:
    if isinstance(raw, bool):
        value = None
    elif isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and DIGITS.fullmatch(raw):
        value = int(raw)
    else:
        value = None

    if value is None or not 0 < value <= MAX_IDENTIFIER:
        raise InvalidId(f"Invalid {label} ID", details={field: raw})
    return value


def resolve_lot(repository: TraceabilityRepository, raw_id) -> LotRecord:
    lot_id = parse_identifier(raw_id, "ingredient_lot_id", "ingredient lot")
    lot = repository.get_lot(lot_id)
    if lot is None:
        raise ResourceNotFound("Ingredient lot not found", details={"ingredient_lot_id": lot_id})
    return lot


def resolve_pallet(repository: TraceabilityRepository, raw_id) -> PalletLineage:
    pallet_id = parse_identifier(raw_id, "pallet_id", "pallet")
    lineage = repository.get_pallet_with_lineage(pallet_id)
    if lineage is None:
        raise ResourceNotFound("Pallet not found", details={"pallet_id": pallet_id})
    return lineage


def resolve_lot_lineage(repository: TraceabilityRepository, raw_id) -> LotLineage:
    lot_id = parse_identifier(raw_id, "ingredient_lot_id", "ingredient lot")
    lineage = repository.get_lot_with_usages(lot_id)
    if lineage is None:
        raise ResourceNotFound("Ingredient lot not found", details={"ingredient_lot_id": lot_id})
    return lineage
