from django.conf import settings
from django.http import HttpResponse

ALLOWED_METHODS = ("GET", "POST", "PATCH", "DELETE", "OPTIONS")
ALLOWED_HEADERS = ("Content-Type", "X-API-Key", "Idempotency-Key")
PREFLIGHT_MAX_AGE = 600


def allowed_origin(origin):
    if not origin:
        return None
    if settings.DEBUG or origin in getattr(settings, "CORS_ALLOWED_ORIGINS", []):
        return origin
    return None


class SimpleCORSMiddleware:
    """Answers browser preflights and tags responses for the allowed front-end origins."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        origin = allowed_origin(request.headers.get("Origin"))
        preflight = request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers

        response = HttpResponse(status=204) if preflight else self.get_response(request)
        if origin is None:
            return response

        response["Access-Control-Allow-Origin"] = origin
        response["Vary"] = "Origin"
        if preflight:
            response["Access-Control-Allow-Methods"] = ", ".join(ALLOWED_METHODS)
            response["Access-Control-Allow-Headers"] = ", ".join(ALLOWED_HEADERS)
            response["Access-Control-Max-Age"] = str(PREFLIGHT_MAX_AGE)
        return response
