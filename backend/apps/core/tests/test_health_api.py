from unittest import mock

from django.db import DatabaseError
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APITestCase


class HealthApiTests(APITestCase):
    def test_health_does_not_require_api_key(self):
        response = self.client.get("/api/v1/health")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["status"], "ok")
        self.assertEqual(response.json()["database"], "connected")

    def test_health_reports_database_outage(self):
        with mock.patch("apps.core.api.v1.views.connection") as fake_connection:
            fake_connection.cursor.side_effect = DatabaseError("down")
            response = self.client.get("/api/v1/health")

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.json()["database"], "disconnected")


class ApiKeyTests(APITestCase):
    def test_missing_api_key_is_rejected(self):
        response = self.client.get("/api/v1/suppliers/")

        self.assertIn(response.status_code, {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN})
        self.assertIn(response.json()["code"], {"AUTHENTICATION_FAILED", "PERMISSION_DENIED"})

    def test_invalid_api_key_returns_401(self):
        self.client.credentials(HTTP_X_API_KEY="wrong-key")

        response = self.client.get("/api/v1/suppliers/")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.json()["code"], "AUTHENTICATION_FAILED")
        self.assertEqual(response.json()["error"], "Invalid API key.")


@override_settings(DEBUG=False, CORS_ALLOWED_ORIGINS=["http://localhost:3000"])
class CorsTests(APITestCase):
    def test_preflight_is_answered_without_api_key(self):
        response = self.client.options(
            "/api/v1/traceability/forward/1",
            HTTP_ORIGIN="http://localhost:3000",
            HTTP_ACCESS_CONTROL_REQUEST_METHOD="GET",
        )

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(response["Access-Control-Allow-Origin"], "http://localhost:3000")
        self.assertIn("Idempotency-Key", response["Access-Control-Allow-Headers"])

    def test_unknown_origin_gets_no_cors_headers(self):
        response = self.client.get("/api/v1/health", HTTP_ORIGIN="http://evil.example")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn("Access-Control-Allow-Origin", response)
