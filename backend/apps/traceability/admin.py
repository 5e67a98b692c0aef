from django.contrib import admin

from apps.traceability.models import RecallExecution


@admin.register(RecallExecution)
class RecallExecutionAdmin(admin.ModelAdmin):
    list_display = ("ingredient_lot", "status", "executed_by", "idempotency_key", "started_at", "finished_at")
    list_filter = ("status",)
    search_fields = ("ingredient_lot__internal_lot_code", "idempotency_key", "executed_by")
    readonly_fields = ("result", "started_at", "finished_at")
