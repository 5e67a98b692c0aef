import logging

from django.db import DatabaseError, connection
from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

logger = logging.getLogger(__name__)


class HealthView(APIView):
    authentication_classes = []
    permission_classes = []

    def get(self, request):
        payload = {"service": "bakery-trace", "version": "v1", "timestamp": timezone.now().isoformat()}
        try:
            with connection.cursor() as cursor:
                cursor.execute("SELECT 1")
        except DatabaseError as exc:
            logger.error("Health check failed: %s", exc)
            return Response(
                {**payload, "status": "unhealthy", "database": "disconnected"},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        return Response({**payload, "status": "ok", "database": "connected"})
