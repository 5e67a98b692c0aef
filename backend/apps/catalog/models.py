from django.db import models


class Supplier(models.Model):
    name = models.CharField(max_length=255, unique=True)
    contact_email = models.EmailField(blank=True, null=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "catalog_supplier"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class StorageType(models.TextChoices):
    DRY = "dry", "dry"
    REFRIGERATED = "refrigerated", "refrigerated"
    FROZEN = "frozen", "frozen"


class Allergen(models.TextChoices):
    MILK = "milk", "milk"
    EGGS = "eggs", "eggs"
    WHEAT = "wheat", "wheat"
    SOY = "soy", "soy"
    NUTS = "nuts", "nuts"
    PEANUTS = "peanuts", "peanuts"
    SESAME = "sesame", "sesame"
    FISH = "fish", "fish"
    SHELLFISH = "shellfish", "shellfish"


class Ingredient(models.Model):
    name = models.CharField(max_length=255, unique=True)
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.SET_NULL,
        related_name="ingredients",
        blank=True,
        null=True,
    )
    supplier_code = models.CharField(max_length=128, blank=True, null=True)
    storage_type = models.CharField(max_length=16, choices=StorageType.choices, default=StorageType.DRY)
    shelf_life_days = models.PositiveIntegerField(blank=True, null=True)
    allergens = models.JSONField(default=list, blank=True)
    certifications = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "catalog_ingredient"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Recipe(models.Model):
    name = models.CharField(max_length=255)
    version = models.CharField(max_length=32, default="1.0")
    description = models.TextField(blank=True, null=True)
    yield_quantity = models.DecimalField(max_digits=12, decimal_places=3, blank=True, null=True)
    yield_unit = models.CharField(max_length=16, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "catalog_recipe"
        ordering = ["name", "version"]
        constraints = [
            models.UniqueConstraint(
                fields=["name", "version"],
                name="uq_catalog_recipe_name_version",
            )
        ]

    def __str__(self) -> str:
        return f"{self.name} v{self.version}"
