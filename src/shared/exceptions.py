import logging
import re

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class InvalidIdentifier(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid ID format"
    default_code = "invalid_id"


class ListingNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Listing not found"
    default_code = "listing_not_found"


class OwnerNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Owner not found"
    default_code = "owner_not_found"


class UserNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "User not found"
    default_code = "user_not_found"


_unique_column_re = re.compile(r"(?:UNIQUE constraint failed: |Duplicate entry .* for key ')([\w.,\s]+)")


def _integrity_to_validation(exc: IntegrityError) -> ValidationError:
    match = _unique_column_re.search(str(exc))
    if match:
        columns = [c.strip().split(".")[-1] for c in match.group(1).split(",")]
        field = columns[-1] if columns else "non_field_errors"
        return ValidationError({field: [f"A record with this {field} already exists."]})
    return ValidationError({"non_field_errors": ["The record conflicts with existing data."]})


def _flatten(detail) -> str:
    if isinstance(detail, dict):
        if "detail" in detail and len(detail) == 1:
            return _flatten(detail["detail"])
        parts = []
        for key, value in detail.items():
            text = _flatten(value)
            parts.append(text if key in ("non_field_errors", "detail") else f"{key}: {text}")
        return ", ".join(parts)
    if isinstance(detail, (list, tuple)):
        return ", ".join(_flatten(item) for item in detail)
    return str(detail)


def api_exception_handler(exc, context):
    """Render every API error as ``{success: false, statusCode, message}``."""
    if isinstance(exc, IntegrityError):
        exc = _integrity_to_validation(exc)
    elif isinstance(exc, DjangoValidationError):
        exc = ValidationError(getattr(exc, "message_dict", None) or exc.messages)

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled API exception in %s",
            type(view).__name__ if view is not None else "unknown view",
            exc_info=exc,
        )
        set_rollback()
        return Response(
            {
                "success": False,
                "statusCode": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "message": "Internal Server Error",
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    payload = {
        "success": False,
        "statusCode": response.status_code,
        "message": _flatten(response.data),
    }
    if isinstance(exc, ValidationError):
        payload["errors"] = response.data
    response.data = payload
    return response
