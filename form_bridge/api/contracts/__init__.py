"""Public API contracts."""

from form_bridge.api.contracts.models import (
    ApiErrorResponse,
    FieldOptionResponse,
    FormFieldResponse,
    HealthResponse,
    InspectFormResponse,
    SubmitFormRequest,
    SubmitFormResponse,
)

__all__ = [
    "ApiErrorResponse",
    "FieldOptionResponse",
    "FormFieldResponse",
    "HealthResponse",
    "InspectFormResponse",
    "SubmitFormRequest",
    "SubmitFormResponse",
]
