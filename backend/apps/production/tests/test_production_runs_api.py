from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal

from rest_framework import status
from rest_framework.test import APITestCase

from apps.catalog.models import Ingredient, Recipe, Supplier
from apps.inventory.models import IngredientLot
from apps.production.models import BatchIngredient, Pallet, ProductionRun


class ProductionRunApiTests(APITestCase):
    def setUp(self):
        self.client.credentials(HTTP_X_API_KEY="dev-api-key")
        self.supplier = Supplier.objects.create(name="Flour Supplier A")
        self.flour = Ingredient.objects.create(name="Premium Flour", supplier=self.supplier, allergens=["wheat"])
        self.recipe = Recipe.objects.create(name="Vanilla Cake", version="1")
        self.lot = IngredientLot.objects.create(
            ingredient=self.flour,
            supplier=self.supplier,
            internal_lot_code="FLOUR-SUPPLIER-A-001",
            received_date=date(2024, 8, 1),
            quantity_received=Decimal("100.000"),
            quantity_remaining=Decimal("100.000"),
            quality_status="passed",
        )
        self.run = ProductionRun.objects.create(
            recipe=self.recipe,
            daily_lot="CAKE-20240814-001",
            planned_quantity=200,
            status="in_progress",
        )

    def _use(self, run, quantity, lot=None):
        return self.client.post(
            f"/api/v1/production-runs/{run.id}/ingredients/",
            {"ingredient_lot": (lot or self.lot).id, "quantity_used": quantity},
            format="json",
        )

    def test_create_production_run(self):
        payload = {
            "recipe": self.recipe.id,
            "daily_lot": "CUPCAKE-20240814-001",
            "planned_quantity": 120,
            "start_time": "2024-08-14T06:00:00Z",
        }

        response = self.client.post("/api/v1/production-runs/", payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertEqual(body["status"], "planned")
        self.assertEqual(body["recipe_name"], "Vanilla Cake")
        self.assertEqual(body["batch_ingredients"], [])

    def test_recording_usage_decrements_remaining_quantity(self):
        response = self._use(self.run, "30.000")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()["internal_lot_code"], "FLOUR-SUPPLIER-A-001")
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantity_remaining, Decimal("70.000"))
        self.assertEqual(self.lot.status, "active")

    def test_usage_draining_lot_marks_it_depleted(self):
        self._use(self.run, "60.000")
        response = self._use(self.run, "40.000")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantity_remaining, Decimal("0.000"))
        self.assertEqual(self.lot.status, "depleted")

    def test_over_draw_returns_409_and_leaves_lot_untouched(self):
        self._use(self.run, "80.000")

        response = self._use(self.run, "20.001")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        body = response.json()
        self.assertEqual(body["code"], "INSUFFICIENT_QUANTITY")
        self.assertEqual(body["details"]["remaining"], "20.000")
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantity_remaining, Decimal("20.000"))
        self.assertEqual(BatchIngredient.objects.count(), 1)

    def test_quarantined_lot_cannot_be_used(self):
        self.lot.quality_status = "quarantined"
        self.lot.save()

        response = self._use(self.run, "1.000")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["code"], "LOT_NOT_USABLE")

    def test_non_positive_usage_returns_validation_error(self):
        response = self._use(self.run, "0")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["code"], "VALIDATION_ERROR")

    def test_passed_run_only_accepts_quality_updates(self):
        self.run.quality_status = "passed"
        self.run.save()

        forbidden = self.client.patch(
            f"/api/v1/production-runs/{self.run.id}/",
            {"planned_quantity": 50},
            format="json",
        )
        allowed = self.client.patch(
            f"/api/v1/production-runs/{self.run.id}/",
            {"quality_notes": "Texture checked"},
            format="json",
        )

        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(forbidden.json()["code"], "UPDATE_FORBIDDEN")
        self.assertEqual(allowed.status_code, status.HTTP_200_OK)
        self.assertEqual(allowed.json()["quality_notes"], "Texture checked")

    def test_end_time_before_start_time_is_rejected(self):
        self.run.start_time = datetime(2024, 8, 14, 8, 0, tzinfo=dt_timezone.utc)
        self.run.save()

        response = self.client.patch(
            f"/api/v1/production-runs/{self.run.id}/",
            {"end_time": "2024-08-14T07:00:00Z"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["code"], "INVALID_TIME_RANGE")

    def test_invalid_status_transition_returns_409(self):
        response = self.client.patch(
            f"/api/v1/production-runs/{self.run.id}/",
            {"status": "recalled"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["code"], "INVALID_STATUS_TRANSITION")

    def test_delete_run_restores_lot_quantity(self):
        self._use(self.run, "100.000")
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.status, "depleted")

        response = self.client.delete(f"/api/v1/production-runs/{self.run.id}/")

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantity_remaining, Decimal("100.000"))
        self.assertEqual(self.lot.status, "active")
        self.assertFalse(BatchIngredient.objects.exists())

    def test_delete_run_with_shipped_pallet_is_forbidden(self):
        Pallet.objects.create(
            production_run=self.run,
            pallet_code="CAKE-PAL-001",
            shipping_status="shipped",
            customer_order="CO-2024-001",
        )

        response = self.client.delete(f"/api/v1/production-runs/{self.run.id}/")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["code"], "DELETE_FORBIDDEN")
        self.assertTrue(ProductionRun.objects.filter(pk=self.run.pk).exists())

    def test_pack_and_ship_pallet(self):
        packed = self.client.post(
            f"/api/v1/production-runs/{self.run.id}/pallets/",
            {"pallet_code": "CAKE-PAL-001", "quantity_packed": 48, "shipping_status": "active"},
            format="json",
        )
        self.assertEqual(packed.status_code, status.HTTP_201_CREATED)
        pallet_id = packed.json()["id"]

        shipped = self.client.post(
            f"/api/v1/pallets/{pallet_id}/ship/",
            {"customer_order": "CO-2024-001"},
            format="json",
        )

        self.assertEqual(shipped.status_code, status.HTTP_200_OK)
        body = shipped.json()
        self.assertEqual(body["shipping_status"], "shipped")
        self.assertEqual(body["customer_order"], "CO-2024-001")
        self.assertIsNotNone(body["shipped_at"])

        again = self.client.post(
            f"/api/v1/pallets/{pallet_id}/ship/",
            {"customer_order": "CO-2024-002"},
            format="json",
        )
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.json()["code"], "PALLET_NOT_SHIPPABLE")
