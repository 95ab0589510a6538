"""Pydantic API models used in OpenAPI contracts."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ApiErrorResponse(BaseModel):
    """Stable error envelope for API responses."""

    error_code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """Health check response payload."""

    status: Literal["ok"]


class FieldOptionResponse(BaseModel):
    """One choice of a select or radio field."""

    value: str
    label: str


class FormFieldResponse(BaseModel):
    """One extracted question."""

    name: str
    type: str
    label: str
    required: bool = False
    options: list[FieldOptionResponse] | None = None


class InspectFormResponse(BaseModel):
    """Final schema of an inspected form."""

    action: str
    fbzx: str = ""
    fields: list[FormFieldResponse] = Field(default_factory=list)
    hidden_params: dict[str, str] = Field(default_factory=dict)
    origin_view_url: str
    rendered: bool = Field(
        default=False,
        description="Whether the headless-render pass contributed to the schema",
    )


class SubmitFormRequest(BaseModel):
    """Answers to submit together with the inspected form state."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    action: str | None = None
    fbzx: str | None = None
    answers: dict[str, Any] | None = None
    hidden_params: dict[str, Any] | None = Field(default=None, alias="hiddenParams")
    origin_view_url: str | None = Field(default=None, alias="originViewUrl")


class SubmitFormResponse(BaseModel):
    """Outcome of a submission attempt."""

    success: bool
    status: int
    debug: str | None = Field(
        default=None,
        description="Truncated response body excerpt when submission failed",
    )
