from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler


class ApiError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request failed."
    default_code = "API_ERROR"

    def __init__(self, message=None, code=None, details=None):
        super().__init__(detail=message or self.default_detail, code=code or self.default_code)
        self.error_code = code or self.default_code
        self.details = details if details is not None else {}


class InvalidId(ApiError):
    default_detail = "Invalid identifier."
    default_code = "INVALID_ID"


class ResourceNotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found."
    default_code = "NOT_FOUND"


class OperationForbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Operation not allowed."
    default_code = "FORBIDDEN"


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Request conflicts with the current state."
    default_code = "CONFLICT"


class ServiceFailure(ApiError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Unexpected failure."
    default_code = "INTERNAL_ERROR"


def bakery_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ApiError):
        response.data = {
            "error": str(exc.detail),
            "code": exc.error_code,
            "details": exc.details,
        }
        return response

    if isinstance(exc, ValidationError):
        response.data = {
            "error": "Request validation failed.",
            "code": "VALIDATION_ERROR",
            "details": response.data,
        }
        return response

    detail = response.data.get("detail") if isinstance(response.data, dict) else response.data
    code = str(getattr(exc, "default_code", "api_error")).upper()

    if response.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        code = "INTERNAL_ERROR"
    elif response.status_code == status.HTTP_401_UNAUTHORIZED:
        code = "AUTHENTICATION_FAILED"
    elif response.status_code == status.HTTP_403_FORBIDDEN:
        code = "PERMISSION_DENIED"
    elif response.status_code == status.HTTP_404_NOT_FOUND:
        code = "NOT_FOUND"

    response.data = {
        "error": str(detail),
        "code": code,
        "details": {},
    }
    return response
