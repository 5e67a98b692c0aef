import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="RecallExecution",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("idempotency_key", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("started", "started"), ("completed", "completed"), ("failed", "failed")],
                        default="started",
                        max_length=16,
                    ),
                ),
                ("reason", models.TextField()),
                ("executed_by", models.CharField(blank=True, max_length=128, null=True)),
                ("result", models.JSONField(blank=True, default=dict)),
                ("started_at", models.DateTimeField(auto_now_add=True)),
                ("finished_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "ingredient_lot",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="recall_executions",
                        to="inventory.ingredientlot",
                    ),
                ),
            ],
            options={
                "db_table": "traceability_recall_execution",
                "ordering": ["-started_at", "-id"],
            },
        ),
        migrations.AddConstraint(
            model_name="recallexecution",
            constraint=models.UniqueConstraint(
                condition=models.Q(status="completed"),
                fields=("idempotency_key",),
                name="uq_traceability_recall_completed_key",
            ),
        ),
        migrations.AddIndex(
            model_name="recallexecution",
            index=models.Index(fields=["idempotency_key"], name="idx_traceability_recall_key"),
        ),
    ]
