from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from apps.catalog.models import Ingredient, Supplier


class QualityStatus(models.TextChoices):
    PENDING = "pending", "pending"
    PASSED = "passed", "passed"
    FAILED = "failed", "failed"
    QUARANTINED = "quarantined", "quarantined"


class LotStatus(models.TextChoices):
    ACTIVE = "active", "active"
    DEPLETED = "depleted", "depleted"
    RECALLED = "recalled", "recalled"


class IngredientLot(models.Model):
    ingredient = models.ForeignKey(Ingredient, on_delete=models.PROTECT, related_name="lots")
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="lots")
    supplier_lot_code = models.CharField(max_length=128, blank=True, null=True)
    internal_lot_code = models.CharField(max_length=128, unique=True)
    received_date = models.DateField()
    expiration_date = models.DateField(blank=True, null=True)
    manufacture_date = models.DateField(blank=True, null=True)
    quantity_received = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
    )
    quantity_remaining = models.DecimalField(max_digits=12, decimal_places=3)
    quality_status = models.CharField(max_length=16, choices=QualityStatus.choices, default=QualityStatus.PENDING)
    status = models.CharField(max_length=16, choices=LotStatus.choices, default=LotStatus.ACTIVE)
    storage_location = models.CharField(max_length=128, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "inventory_ingredient_lot"
        ordering = ["-received_date", "internal_lot_code"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_remaining__gte=0),
                name="ck_inventory_lot_remaining_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity_remaining__lte=models.F("quantity_received")),
                name="ck_inventory_lot_remaining_lte_received",
            ),
        ]
        indexes = [
            models.Index(fields=["quality_status"], name="idx_inventory_lot_quality"),
            models.Index(fields=["expiration_date"], name="idx_inventory_lot_expiration"),
        ]

    def __str__(self) -> str:
        return f"{self.internal_lot_code}"

    @property
    def is_usable(self) -> bool:
        return self.status == LotStatus.ACTIVE and self.quality_status not in {
            QualityStatus.FAILED,
            QualityStatus.QUARANTINED,
        }
