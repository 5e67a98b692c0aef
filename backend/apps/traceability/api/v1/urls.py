from django.urls import path
from rest_framework.routers import SimpleRouter

from apps.traceability.api.v1.views import (
    BackwardTraceView,
    ForwardTraceView,
    RecallAssessmentView,
    RecallExecutionView,
    RecallExecutionViewSet,
)


router = SimpleRouter()
router.register("traceability/recall-executions", RecallExecutionViewSet, basename="recall-execution")

urlpatterns = [
    path("traceability/forward/<str:identifier>", ForwardTraceView.as_view(), name="traceability-forward"),
    path("traceability/backward/<str:identifier>", BackwardTraceView.as_view(), name="traceability-backward"),
    path("traceability/recall/<str:identifier>", RecallAssessmentView.as_view(), name="traceability-recall"),
    path(
        "traceability/recall/<str:identifier>/execute",
        RecallExecutionView.as_view(),
        name="traceability-recall-execute",
    ),
] + router.urls
