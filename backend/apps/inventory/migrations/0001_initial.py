import decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="IngredientLot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("supplier_lot_code", models.CharField(blank=True, max_length=128, null=True)),
                ("internal_lot_code", models.CharField(max_length=128, unique=True)),
                ("received_date", models.DateField()),
                ("expiration_date", models.DateField(blank=True, null=True)),
                ("manufacture_date", models.DateField(blank=True, null=True)),
                (
                    "quantity_received",
                    models.DecimalField(
                        decimal_places=3,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0.001"))],
                    ),
                ),
                ("quantity_remaining", models.DecimalField(decimal_places=3, max_digits=12)),
                (
                    "quality_status",
                    models.CharField(
                        choices=[
                            ("pending", "pending"),
                            ("passed", "passed"),
                            ("failed", "failed"),
                            ("quarantined", "quarantined"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "active"), ("depleted", "depleted"), ("recalled", "recalled")],
                        default="active",
                        max_length=16,
                    ),
                ),
                ("storage_location", models.CharField(blank=True, max_length=128, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "ingredient",
                    models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="lots", to="catalog.ingredient"),
                ),
                (
                    "supplier",
                    models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="lots", to="catalog.supplier"),
                ),
            ],
            options={
                "db_table": "inventory_ingredient_lot",
                "ordering": ["-received_date", "internal_lot_code"],
            },
        ),
        migrations.AddConstraint(
            model_name="ingredientlot",
            constraint=models.CheckConstraint(
                condition=models.Q(quantity_remaining__gte=0),
                name="ck_inventory_lot_remaining_non_negative",
            ),
        ),
        migrations.AddConstraint(
            model_name="ingredientlot",
            constraint=models.CheckConstraint(
                condition=models.Q(quantity_remaining__lte=models.F("quantity_received")),
                name="ck_inventory_lot_remaining_lte_received",
            ),
        ),
        migrations.AddIndex(
            model_name="ingredientlot",
            index=models.Index(fields=["quality_status"], name="idx_inventory_lot_quality"),
        ),
        migrations.AddIndex(
            model_name="ingredientlot",
            index=models.Index(fields=["expiration_date"], name="idx_inventory_lot_expiration"),
        ),
    ]
