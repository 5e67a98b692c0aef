import decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ProductionRun",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("daily_lot", models.CharField(max_length=64, unique=True)),
                ("cake_lot", models.CharField(blank=True, max_length=64, null=True)),
                ("icing_lot", models.CharField(blank=True, max_length=64, null=True)),
                ("planned_quantity", models.PositiveIntegerField()),
                ("actual_quantity", models.PositiveIntegerField(blank=True, null=True)),
                ("start_time", models.DateTimeField(blank=True, null=True)),
                ("end_time", models.DateTimeField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("planned", "planned"),
                            ("in_progress", "in_progress"),
                            ("completed", "completed"),
                            ("failed", "failed"),
                            ("recalled", "recalled"),
                        ],
                        default="planned",
                        max_length=16,
                    ),
                ),
                (
                    "quality_status",
                    models.CharField(
                        choices=[
                            ("pending", "pending"),
                            ("passed", "passed"),
                            ("failed", "failed"),
                            ("conditional_pass", "conditional_pass"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("quality_notes", models.TextField(blank=True, null=True)),
                ("primary_operator", models.CharField(blank=True, max_length=128, null=True)),
                ("equipment_station", models.CharField(blank=True, max_length=64, null=True)),
                ("temperature", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("humidity", models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "recipe",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="production_runs",
                        to="catalog.recipe",
                    ),
                ),
            ],
            options={
                "db_table": "production_run",
                "ordering": ["-created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="BatchIngredient",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "quantity_used",
                    models.DecimalField(
                        decimal_places=3,
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0.001"))],
                    ),
                ),
                ("added_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("added_by", models.CharField(blank=True, max_length=128, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                (
                    "ingredient_lot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="batch_usages",
                        to="inventory.ingredientlot",
                    ),
                ),
                (
                    "production_run",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="batch_ingredients",
                        to="production.productionrun",
                    ),
                ),
            ],
            options={
                "db_table": "production_batch_ingredient",
                "ordering": ["added_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="Pallet",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("pallet_code", models.CharField(max_length=64, unique=True)),
                ("quantity_packed", models.PositiveIntegerField(blank=True, null=True)),
                ("location", models.CharField(blank=True, max_length=128, null=True)),
                (
                    "shipping_status",
                    models.CharField(
                        choices=[
                            ("pending", "pending"),
                            ("active", "active"),
                            ("shipped", "shipped"),
                            ("recalled", "recalled"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("packing_date", models.DateField(blank=True, null=True)),
                ("expiration_date", models.DateField(blank=True, null=True)),
                ("shipped_at", models.DateTimeField(blank=True, null=True)),
                ("customer_order", models.CharField(blank=True, max_length=64, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "production_run",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pallets",
                        to="production.productionrun",
                    ),
                ),
            ],
            options={
                "db_table": "production_pallet",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.AddConstraint(
            model_name="batchingredient",
            constraint=models.CheckConstraint(
                condition=models.Q(quantity_used__gt=0),
                name="ck_production_batch_ingredient_qty_positive",
            ),
        ),
        migrations.AddIndex(
            model_name="pallet",
            index=models.Index(fields=["shipping_status"], name="idx_production_pallet_status"),
        ),
        migrations.AddIndex(
            model_name="pallet",
            index=models.Index(fields=["customer_order"], name="idx_production_pallet_order"),
        ),
    ]
