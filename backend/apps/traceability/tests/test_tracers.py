from datetime import date, timedelta
from decimal import Decimal
from unittest import mock

from django.test import SimpleTestCase
from rest_framework.renderers import JSONRenderer

from apps.core.api.exceptions import InvalidId, ResourceNotFound
from apps.traceability.services.backward import trace_backward
from apps.traceability.services.forward import trace_forward
from apps.traceability.services.resolver import parse_identifier, resolve_lot_lineage, resolve_pallet
from apps.traceability.tests.fakes import flour_scenario, utc

TRACE_DAY = date(2024, 8, 14)


class ResolverTests(SimpleTestCase):
    def setUp(self):
        self.repository = flour_scenario()

    def test_parse_identifier_accepts_positive_integers(self):
        self.assertEqual(parse_identifier("42", "pallet_id", "pallet"), 42)
        self.assertEqual(parse_identifier(7, "pallet_id", "pallet"), 7)

    def test_parse_identifier_rejects_malformed_values(self):
        for raw in ("abc", "0", "-3", "1.5", "", " 12", "12abc", 0, True):
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidId) as ctx:
                    parse_identifier(raw, "ingredient_lot_id", "ingredient lot")
                self.assertEqual(ctx.exception.error_code, "INVALID_ID")
                self.assertEqual(ctx.exception.details, {"ingredient_lot_id": raw})

    def test_lot_lineage_is_loaded_once(self):
        with mock.patch.object(self.repository, "get_lot", side_effect=AssertionError("unexpected lookup")):
            lineage = resolve_lot_lineage(self.repository, "1")

        self.assertEqual(lineage.lot.internal_lot_code, "FLOUR-SUPPLIER-A-001")

    def test_unknown_identifiers_raise_not_found(self):
        with self.assertRaises(ResourceNotFound) as ctx:
            resolve_lot_lineage(self.repository, "999")
        self.assertEqual(ctx.exception.details, {"ingredient_lot_id": 999})

        with self.assertRaises(ResourceNotFound) as ctx:
            resolve_pallet(self.repository, "999")
        self.assertEqual(ctx.exception.details, {"pallet_id": 999})


class ForwardTraceTests(SimpleTestCase):
    def setUp(self):
        self.repository = flour_scenario()

    def test_flour_lot_impact(self):
        result = trace_forward(self.repository.get_lot_with_usages(1))

        impact = result["impact"]
        self.assertEqual(impact["total_production_runs"], 2)
        self.assertEqual(impact["total_pallets"], 2)
        self.assertEqual(impact["shipped_pallets"], 1)
        self.assertEqual(impact["inventory_pallets"], 1)
        self.assertEqual(impact["recalled_pallets"], 0)
        self.assertEqual(impact["customer_orders_affected"], 1)
        self.assertEqual(impact["total_quantity_produced"], 196)
        self.assertEqual(
            impact["customer_impact"],
            [{"customer_order": "CO-2024-001", "pallets": ["CUPCAKE-PAL-001"], "total_quantity": 120}],
        )
        self.assertEqual(
            [run["daily_lot"] for run in result["production_runs"]],
            ["CAKE-20240814-001", "CUPCAKE-20240814-001"],
        )
        self.assertEqual(result["production_runs"][1]["quantity_used"], Decimal("15.000"))
        self.assertEqual(result["source"]["ingredient_lot"]["internal_lot_code"], "FLOUR-SUPPLIER-A-001")

    def test_chain_is_sorted_by_level_then_oldest_first(self):
        chain = trace_forward(self.repository.get_lot_with_usages(1))["traceability_chain"]

        self.assertEqual([node["level"] for node in chain], [1, 2, 2, 3, 3])
        self.assertEqual([node["id"] for node in chain], [1, 10, 11, 100, 101])
        self.assertEqual(chain[0]["type"], "ingredient_lot")
        self.assertEqual(chain[1]["details"]["quantity_used"], Decimal("25.000"))

    def test_pallets_are_counted_once(self):
        self.repository.add_usage(1005, 11, 1, "5.000")

        result = trace_forward(self.repository.get_lot_with_usages(1))

        self.assertEqual(result["impact"]["total_pallets"], 2)
        self.assertEqual(len(result["affected_pallets"]), 2)
        self.assertEqual(result["production_runs"][1]["quantity_used"], Decimal("20.000"))

    def test_shipped_pallet_without_order_is_not_a_customer_order(self):
        self.repository.add_pallet(102, 11, "CUPCAKE-PAL-002", utc(2024, 8, 14, 12, 0), shipping_status="shipped")

        impact = trace_forward(self.repository.get_lot_with_usages(1))["impact"]

        self.assertEqual(impact["shipped_pallets"], 2)
        self.assertEqual(impact["customer_orders_affected"], 1)

    def test_unused_lot_has_empty_impact(self):
        self.repository.add_lot(4, "BUTTER-UNUSED", ingredient_name="Butter", allergens=("milk",))

        result = trace_forward(self.repository.get_lot_with_usages(4))

        self.assertEqual(result["impact"]["total_production_runs"], 0)
        self.assertEqual(result["affected_pallets"], [])
        self.assertEqual(len(result["traceability_chain"]), 1)

    def test_trace_is_byte_identical_on_repeat(self):
        renderer = JSONRenderer()

        first = renderer.render(trace_forward(self.repository.get_lot_with_usages(1)))
        second = renderer.render(trace_forward(self.repository.get_lot_with_usages(1)))

        self.assertEqual(first, second)


class BackwardTraceTests(SimpleTestCase):
    def setUp(self):
        self.repository = flour_scenario()

    def trace(self, pallet_id):
        return trace_backward(self.repository.get_pallet_with_lineage(pallet_id), TRACE_DAY)

    def test_ingredient_lots_match_run_usages(self):
        result = self.trace(101)

        self.assertEqual([lot["id"] for lot in result["ingredient_lots"]], [1, 2, 3])
        eggs = result["ingredient_lots"][2]
        self.assertEqual(eggs["quantity_used"], Decimal("3.500"))
        self.assertEqual(len(eggs["usage_details"]), 2)
        self.assertEqual(result["target"]["production_run"]["daily_lot"], "CUPCAKE-20240814-001")
        self.assertEqual(result["target"]["pallet"]["customer_order"], "CO-2024-001")

    def test_chain_is_sorted_by_level_then_newest_first(self):
        chain = self.trace(101)["traceability_chain"]

        self.assertEqual([node["level"] for node in chain], [1, 2, 3, 3, 3])
        self.assertEqual([node["id"] for node in chain], [101, 11, 3, 2, 1])

    def test_risk_factors(self):
        assessment = self.trace(101)["risk_assessment"]

        found = {(factor["type"], factor["ingredient_lot_id"]) for factor in assessment["risk_factors"]}
        self.assertEqual(
            found,
            {
                ("ALLERGEN_PRESENT", 1),
                ("NEAR_EXPIRATION", 2),
                ("EXPIRED_INGREDIENT", 3),
                ("QUALITY_FAILURE", 3),
                ("ALLERGEN_PRESENT", 3),
            },
        )
        self.assertEqual(assessment["total_risk_factors"], 5)
        self.assertEqual(assessment["critical_issues"], 1)
        self.assertEqual(assessment["high_issues"], 1)
        self.assertEqual(assessment["medium_issues"], 3)

    def test_expiration_on_trace_day_counts_as_expired(self):
        self.repository.add_lot(5, "MILK-005", ingredient_name="Milk", expiration_date=TRACE_DAY)
        self.repository.add_usage(1006, 10, 5, "4.000")

        factors = self.trace(100)["risk_assessment"]["risk_factors"]

        self.assertIn(("EXPIRED_INGREDIENT", "HIGH"), {(f["type"], f["severity"]) for f in factors if f["ingredient_lot_id"] == 5})

    def test_near_expiration_window_is_inclusive(self):
        self.repository.add_lot(7, "BUTTER-007", ingredient_name="Butter", expiration_date=TRACE_DAY + timedelta(days=30))
        self.repository.add_lot(8, "CREAM-008", ingredient_name="Cream", expiration_date=TRACE_DAY + timedelta(days=31))
        self.repository.add_usage(1008, 10, 7, "1.000")
        self.repository.add_usage(1009, 10, 8, "1.000")

        factors = self.trace(100)["risk_assessment"]["risk_factors"]

        by_lot = {(factor["ingredient_lot_id"], factor["type"]) for factor in factors}
        self.assertIn((7, "NEAR_EXPIRATION"), by_lot)
        self.assertFalse([factor for factor in factors if factor["ingredient_lot_id"] == 8])

    def test_recalled_lot_is_flagged(self):
        self.repository.add_lot(6, "VANILLA-006", ingredient_name="Vanilla", status="recalled", quality_status="quarantined")
        self.repository.add_usage(1007, 10, 6, "0.200")

        result = self.trace(100)

        types = {factor["type"] for factor in result["risk_assessment"]["risk_factors"] if factor["ingredient_lot_id"] == 6}
        self.assertEqual(types, {"RECALLED_INGREDIENT"})
        self.assertEqual(result["summary"]["recalled_lots"], 1)
        self.assertEqual(result["summary"]["quality_quarantined_lots"], 1)

    def test_supplier_analysis_and_summary(self):
        result = self.trace(101)

        suppliers = {entry["supplier_name"]: entry for entry in result["supplier_analysis"]}
        self.assertEqual(set(suppliers), {"Flour Supplier A", "Sugar Co", "Egg Farm"})
        self.assertEqual(suppliers["Egg Farm"]["quality_issues"], 1)
        self.assertEqual(suppliers["Egg Farm"]["total_quantity_used"], Decimal("3.500"))
        self.assertEqual(suppliers["Flour Supplier A"]["lot_count"], 1)

        summary = result["summary"]
        self.assertEqual(summary["total_ingredient_lots"], 3)
        self.assertEqual(summary["total_suppliers"], 3)
        self.assertEqual(summary["quality_passed_lots"], 2)
        self.assertEqual(summary["quality_failed_lots"], 1)
        self.assertEqual(summary["recalled_lots"], 0)

    def test_forward_and_backward_traces_agree(self):
        for lot_id in (1, 2, 3):
            forward = trace_forward(self.repository.get_lot_with_usages(lot_id))
            for pallet in forward["affected_pallets"]:
                backward = self.trace(pallet["id"])
                self.assertIn(lot_id, [lot["id"] for lot in backward["ingredient_lots"]])

    def test_trace_is_byte_identical_on_repeat(self):
        renderer = JSONRenderer()

        self.assertEqual(renderer.render(self.trace(101)), renderer.render(self.trace(101)))
