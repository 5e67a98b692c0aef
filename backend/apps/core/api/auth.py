import hmac
import logging

from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from rest_framework import authentication, exceptions
from rest_framework.permissions import BasePermission

logger = logging.getLogger(__name__)


def is_known_key(candidate: str) -> bool:
    return any(hmac.compare_digest(candidate, key) for key in getattr(settings, "BAKERY_API_KEYS", []))


class ApiKeyAuthentication(authentication.BaseAuthentication):
    """Station terminals authenticate with a shared key in ``X-API-Key``."""

    header = "X-API-Key"

    def authenticate(self, request):
        api_key = request.headers.get(self.header)
        if not api_key:
            return None
        if not is_known_key(api_key):
            logger.warning("Rejected API key on %s %s", request.method, request.path)
            raise exceptions.AuthenticationFailed("Invalid API key.")
        return (AnonymousUser(), api_key)

    def authenticate_header(self, request):
        return self.header


class HasValidApiKey(BasePermission):
    message = "A valid X-API-Key header is required."

    def has_permission(self, request, view):
        # preflight carries no credentials
        return request.method == "OPTIONS" or request.auth is not None
