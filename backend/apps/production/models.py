from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from apps.catalog.models import Recipe
from apps.inventory.models import IngredientLot


class RunStatus(models.TextChoices):
    PLANNED = "planned", "planned"
    IN_PROGRESS = "in_progress", "in_progress"
    COMPLETED = "completed", "completed"
    FAILED = "failed", "failed"
    RECALLED = "recalled", "recalled"


class RunQualityStatus(models.TextChoices):
    PENDING = "pending", "pending"
    PASSED = "passed", "passed"
    FAILED = "failed", "failed"
    CONDITIONAL_PASS = "conditional_pass", "conditional_pass"


class ShippingStatus(models.TextChoices):
    PENDING = "pending", "pending"
    ACTIVE = "active", "active"
    SHIPPED = "shipped", "shipped"
    RECALLED = "recalled", "recalled"


INVENTORY_SHIPPING_STATUSES = (ShippingStatus.PENDING, ShippingStatus.ACTIVE)


class ProductionRun(models.Model):
    recipe = models.ForeignKey(Recipe, on_delete=models.PROTECT, related_name="production_runs")
    daily_lot = models.CharField(max_length=64, unique=True)
    cake_lot = models.CharField(max_length=64, blank=True, null=True)
    icing_lot = models.CharField(max_length=64, blank=True, null=True)
    planned_quantity = models.PositiveIntegerField()
    actual_quantity = models.PositiveIntegerField(blank=True, null=True)
    start_time = models.DateTimeField(blank=True, null=True)
    end_time = models.DateTimeField(blank=True, null=True)
    status = models.CharField(max_length=16, choices=RunStatus.choices, default=RunStatus.PLANNED)
    quality_status = models.CharField(
        max_length=16,
        choices=RunQualityStatus.choices,
        default=RunQualityStatus.PENDING,
    )
    quality_notes = models.TextField(blank=True, null=True)
    primary_operator = models.CharField(max_length=128, blank=True, null=True)
    equipment_station = models.CharField(max_length=64, blank=True, null=True)
    temperature = models.DecimalField(max_digits=5, decimal_places=2, blank=True, null=True)
    humidity = models.DecimalField(max_digits=5, decimal_places=2, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "production_run"
        ordering = ["-created_at", "id"]

    def __str__(self) -> str:
        return self.daily_lot

    @property
    def is_locked(self) -> bool:
        return (
            self.quality_status == RunQualityStatus.PASSED
            or self.status in {RunStatus.COMPLETED, RunStatus.RECALLED}
        )


class BatchIngredient(models.Model):
    production_run = models.ForeignKey(
        ProductionRun,
        on_delete=models.CASCADE,
        related_name="batch_ingredients",
    )
    ingredient_lot = models.ForeignKey(
        IngredientLot,
        on_delete=models.PROTECT,
        related_name="batch_usages",
    )
    quantity_used = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
    )
    added_at = models.DateTimeField(default=timezone.now)
    added_by = models.CharField(max_length=128, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    class Meta:
        db_table = "production_batch_ingredient"
        ordering = ["added_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_used__gt=0),
                name="ck_production_batch_ingredient_qty_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.production_run_id} <- {self.ingredient_lot_id} ({self.quantity_used})"


class Pallet(models.Model):
    production_run = models.ForeignKey(ProductionRun, on_delete=models.CASCADE, related_name="pallets")
    pallet_code = models.CharField(max_length=64, unique=True)
    quantity_packed = models.PositiveIntegerField(blank=True, null=True)
    location = models.CharField(max_length=128, blank=True, null=True)
    shipping_status = models.CharField(
        max_length=16,
        choices=ShippingStatus.choices,
        default=ShippingStatus.PENDING,
    )
    packing_date = models.DateField(blank=True, null=True)
    expiration_date = models.DateField(blank=True, null=True)
    shipped_at = models.DateTimeField(blank=True, null=True)
    customer_order = models.CharField(max_length=64, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "production_pallet"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["shipping_status"], name="idx_production_pallet_status"),
            models.Index(fields=["customer_order"], name="idx_production_pallet_order"),
        ]

    def __str__(self) -> str:
        return self.pallet_code
