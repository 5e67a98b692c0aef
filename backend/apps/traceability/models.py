from django.db import models

from apps.inventory.models import IngredientLot


class RecallExecution(models.Model):
    class Status(models.TextChoices):
        STARTED = "started", "started"
        COMPLETED = "completed", "completed"
        FAILED = "failed", "failed"

    ingredient_lot = models.ForeignKey(IngredientLot, on_delete=models.PROTECT, related_name="recall_executions")
    idempotency_key = models.CharField(max_length=255, blank=True, null=True)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.STARTED)
    reason = models.TextField()
    executed_by = models.CharField(max_length=128, blank=True, null=True)
    result = models.JSONField(default=dict, blank=True)
    started_at = models.DateTimeField(auto_now_add=True)
    finished_at = models.DateTimeField(blank=True, null=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "traceability_recall_execution"
        ordering = ["-started_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["idempotency_key"],
                condition=models.Q(status="completed"),
                name="uq_traceability_recall_completed_key",
            ),
        ]
        indexes = [
            models.Index(fields=["idempotency_key"], name="idx_traceability_recall_key"),
        ]

    def __str__(self) -> str:
        return f"{self.ingredient_lot_id}:{self.status}"
