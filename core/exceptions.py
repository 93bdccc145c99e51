from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger("sciencehub")


class Forbidden(APIException):
    """Role or ownership mismatch."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"
    default_code = "forbidden"


class InvalidState(APIException):
    """Operation is not legal for the entity's current status."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Operation not allowed in the current state"
    default_code = "invalid_state"


class InvalidTransition(APIException):
    """Requested status change is not an edge of the state machine."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid status transition"
    default_code = "invalid_transition"


class Conflict(APIException):
    """
    Uniqueness violation or lost race on a conditional update.

    Reported as 400 to keep the contract the web client already handles.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Conflict"
    default_code = "conflict"


def flatten_error_detail(detail) -> str:
    """
    Collapse DRF error details (str / list / nested dict) into one message.

    {"rating": ["Rating must be between 1 and 5"]} -> "rating: Rating must be between 1 and 5"
    """
    if isinstance(detail, dict):
        parts = []
        for field, value in detail.items():
            message = flatten_error_detail(value)
            if field in ("detail", "non_field_errors"):
                parts.append(message)
            else:
                parts.append(f"{field}: {message}")
        return "; ".join(parts)

    if isinstance(detail, (list, tuple)):
        return "; ".join(flatten_error_detail(item) for item in detail)

    return str(detail)


def custom_exception_handler(exc, context):
    """
    Render every API error as {"error": "<message>"}.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it, reshape the body
    if response is not None:
        response.data = {"error": flatten_error_detail(response.data)}
        return response

    # Unhandled exceptions -> 500, without leaking internals
    view = context.get("view")
    logger.exception(
        "Unhandled API exception in %s",
        view.__class__.__name__ if view else "unknown view",
        exc_info=exc,
    )

    return Response(
        {"error": "Internal server error."},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
