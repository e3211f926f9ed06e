"""
API Exceptions - Exception Classes and Error Envelope for the PPALink API

This module provides:
- Resource exceptions (not found / not owned, conflicts)
- Permission exceptions
- Transaction failure exceptions
- The DRF exception handler producing the standard error envelope

All errors follow a consistent format:
{
    "success": false,
    "data": null,
    "message": "Human-readable message",
    "error_code": "MACHINE_READABLE_CODE",
    "errors": [...],
    "meta": {...}
}
"""

import logging
from typing import Any, Dict, List

from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTIONS
# =============================================================================

class PpalinkAPIException(APIException):
    """
    Base exception for all PPALink API errors.

    Attributes:
        status_code: HTTP status code
        default_detail: Default error message
        default_code: Machine-readable error code
        error_code: Specific error code for this instance
        extra_data: Additional data to include in response
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = _("An unexpected error occurred.")
    default_code = "ERROR"

    def __init__(
        self,
        detail: str = None,
        code: str = None,
        extra_data: Dict = None,
        **kwargs
    ):
        self.error_code = code or self.default_code
        self.extra_data = extra_data or {}

        if detail is None:
            detail = str(self.default_detail)

        super().__init__(detail=detail, code=code)

    def get_full_details(self) -> Dict:
        """Get full error details for response."""
        return {
            'message': str(self.detail),
            'error_code': self.error_code,
            'extra_data': self.extra_data,
        }


# =============================================================================
# RESOURCE EXCEPTIONS
# =============================================================================

class ResourceNotFoundError(PpalinkAPIException):
    """
    Raised when a resource does not exist or is not owned by the caller.

    Both cases share one response so that callers cannot discover rows
    belonging to other agencies or users.
    """

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _("The requested resource was not found.")
    default_code = "NOT_FOUND"

    def __init__(self, resource_type: str = None, resource_id: Any = None, **kwargs):
        detail = kwargs.pop('detail', None)
        extra_data = kwargs.pop('extra_data', {})

        if resource_type:
            extra_data['resource_type'] = resource_type

        if resource_id is not None:
            extra_data['resource_id'] = str(resource_id)

        if detail is None:
            if resource_id is not None:
                detail = f"{resource_type or 'Resource'} with ID '{resource_id}' not found."
            elif resource_type:
                detail = f"{resource_type} not found."

        super().__init__(detail=detail, extra_data=extra_data, **kwargs)


class ResourceAlreadyExistsError(PpalinkAPIException):
    """Raised when trying to create a duplicate resource."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = _("A resource with these details already exists.")
    default_code = "ALREADY_EXISTS"

    def __init__(
        self,
        resource_type: str = None,
        conflicting_fields: List[str] = None,
        **kwargs
    ):
        detail = kwargs.pop('detail', None)
        extra_data = kwargs.pop('extra_data', {})

        if resource_type:
            extra_data['resource_type'] = resource_type
            if detail is None:
                detail = f"A {resource_type} with these details already exists."

        if conflicting_fields:
            extra_data['conflicting_fields'] = conflicting_fields

        super().__init__(detail=detail, extra_data=extra_data, **kwargs)


# =============================================================================
# PERMISSION EXCEPTIONS
# =============================================================================

class PermissionDeniedError(PpalinkAPIException):
    """Raised when user doesn't have permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("You do not have permission to perform this action.")
    default_code = "PERMISSION_DENIED"

    def __init__(self, required_permission: str = None, **kwargs):
        extra_data = kwargs.pop('extra_data', {})
        if required_permission:
            extra_data['required_permission'] = required_permission
        super().__init__(extra_data=extra_data, **kwargs)


# =============================================================================
# PERSISTENCE EXCEPTIONS
# =============================================================================

class TransactionFailedError(PpalinkAPIException):
    """
    Raised when the database aborts a transaction.

    Nothing written inside the failed transaction is visible afterwards.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = _("The operation could not be completed. No changes were saved.")
    default_code = "TRANSACTION_FAILED"


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

def ppalink_exception_handler(exc, context):
    """
    Custom exception handler for standardized error responses.

    All errors are formatted as:
    {
        "success": false,
        "data": null,
        "message": "Error description",
        "error_code": "MACHINE_CODE",
        "errors": [...],
        "meta": {
            "timestamp": "ISO8601"
        }
    }
    """
    response = exception_handler(exc, context)

    # Handle unhandled exceptions
    if response is None:
        logger.exception(f"Unhandled exception: {exc}")
        return Response(
            {
                "success": False,
                "data": None,
                "message": "An unexpected error occurred.",
                "error_code": "INTERNAL_ERROR",
                "errors": [],
                "meta": {
                    "timestamp": timezone.now().isoformat(),
                }
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    error_data = {
        "success": False,
        "data": None,
        "message": "",
        "error_code": "ERROR",
        "errors": [],
        "meta": {
            "timestamp": timezone.now().isoformat(),
        }
    }

    if isinstance(exc, PpalinkAPIException):
        error_data["message"] = str(exc.detail)
        error_data["error_code"] = exc.error_code
        if exc.extra_data:
            error_data["meta"].update(exc.extra_data)
        if response.status_code >= 500:
            logger.error(f"{exc.error_code}: {exc.detail}")

    elif isinstance(exc, ValidationError):
        error_data["error_code"] = "VALIDATION_ERROR"
        if isinstance(exc.detail, dict):
            error_data["errors"] = [
                {"field": field, "messages": msgs if isinstance(msgs, list) else [str(msgs)]}
                for field, msgs in exc.detail.items()
            ]
            error_data["message"] = "Validation failed."
        elif isinstance(exc.detail, list):
            error_data["errors"] = [{"field": "non_field_errors", "messages": [str(e) for e in exc.detail]}]
            error_data["message"] = str(exc.detail[0]) if exc.detail else "Validation failed."
        else:
            error_data["message"] = str(exc.detail)

    else:
        error_data["message"] = str(exc.detail) if hasattr(exc, 'detail') else str(exc)
        error_data["error_code"] = getattr(exc, 'default_code', 'ERROR')

    response.data = error_data
    return response
