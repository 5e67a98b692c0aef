import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Supplier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, unique=True)),
                ("contact_email", models.EmailField(blank=True, max_length=254, null=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "catalog_supplier",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Recipe",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("version", models.CharField(default="1.0", max_length=32)),
                ("description", models.TextField(blank=True, null=True)),
                ("yield_quantity", models.DecimalField(blank=True, decimal_places=3, max_digits=12, null=True)),
                ("yield_unit", models.CharField(blank=True, max_length=16, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "catalog_recipe",
                "ordering": ["name", "version"],
            },
        ),
        migrations.CreateModel(
            name="Ingredient",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, unique=True)),
                ("supplier_code", models.CharField(blank=True, max_length=128, null=True)),
                (
                    "storage_type",
                    models.CharField(
                        choices=[("dry", "dry"), ("refrigerated", "refrigerated"), ("frozen", "frozen")],
                        default="dry",
                        max_length=16,
                    ),
                ),
                ("shelf_life_days", models.PositiveIntegerField(blank=True, null=True)),
                ("allergens", models.JSONField(blank=True, default=list)),
                ("certifications", models.JSONField(blank=True, default=list)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "supplier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="ingredients",
                        to="catalog.supplier",
                    ),
                ),
            ],
            options={
                "db_table": "catalog_ingredient",
                "ordering": ["name"],
            },
        ),
        migrations.AddConstraint(
            model_name="recipe",
            constraint=models.UniqueConstraint(
                fields=("name", "version"),
                name="uq_catalog_recipe_name_version",
            ),
        ),
    ]
