from __future__ import annotations

from fastapi.routing import APIRoute

from web_api import app


def _route(path: str) -> APIRoute | None:
    return next(
        (
            candidate
            for candidate in app.routes
            if isinstance(candidate, APIRoute) and candidate.path == path
        ),
        None,
    )


def test_health_endpoint_contract_function() -> None:
    route = _route("/api/health")

    assert route is not None
    payload = route.endpoint()
    assert payload.model_dump() == {"status": "ok"}


def test_openapi_contains_inspect_contracts() -> None:
    schema = app.openapi()
    inspect_op = schema["paths"]["/api/forms/inspect"]["get"]

    assert inspect_op["responses"]["200"]["content"]["application/json"]["schema"][
        "$ref"
    ].endswith("InspectFormResponse")
    assert inspect_op["responses"]["400"]["content"]["application/json"]["schema"][
        "$ref"
    ].endswith("ApiErrorResponse")
    assert inspect_op["responses"]["502"]["content"]["application/json"]["schema"][
        "$ref"
    ].endswith("ApiErrorResponse")
    assert [param["name"] for param in inspect_op["parameters"]] == ["url"]


def test_openapi_contains_submit_contracts() -> None:
    schema = app.openapi()
    submit_op = schema["paths"]["/api/forms/submit"]["post"]

    assert submit_op["requestBody"]["content"]["application/json"]["schema"][
        "$ref"
    ].endswith("SubmitFormRequest")
    assert submit_op["responses"]["200"]["content"]["application/json"]["schema"][
        "$ref"
    ].endswith("SubmitFormResponse")
    assert submit_op["responses"]["400"]["content"]["application/json"]["schema"][
        "$ref"
    ].endswith("ApiErrorResponse")
