from __future__ import annotations

from form_bridge.extraction.models import FormField, FormSchema
from form_bridge.extraction.reconcile import reconcile_schemas


def _fields(*names: str) -> list[FormField]:
    return [FormField(name=name, type="text", label=name) for name in names]


def test_rendered_fields_replace_longer_static_list() -> None:
    static = FormSchema(
        action="https://static/formResponse",
        hidden_params={"fbzx": "1", "fvv": "1"},
        fields=_fields("entry.1", "entry.2", "entry.3"),
    )
    rendered = FormSchema(
        action="https://rendered/formResponse",
        hidden_params={"fbzx": "2"},
        fields=_fields("entry.9"),
    )

    merged = reconcile_schemas(static, rendered)

    assert merged.action == "https://rendered/formResponse"
    assert merged.hidden_params == {"fbzx": "2"}
    assert merged.field_names() == ["entry.9"]


def test_empty_rendered_pass_keeps_static_schema() -> None:
    static = FormSchema(
        action="https://static/formResponse",
        hidden_params={"fbzx": "1"},
        fields=_fields("entry.1", "entry.2"),
    )

    merged = reconcile_schemas(static, FormSchema())

    assert merged.to_dict() == static.to_dict()


def test_parts_are_replaced_independently() -> None:
    static = FormSchema(
        action="https://static/formResponse",
        hidden_params={"fbzx": "1"},
        fields=_fields("entry.1"),
    )
    rendered = FormSchema(action="", hidden_params={}, fields=_fields("entry.7", "entry.8"))

    merged = reconcile_schemas(static, rendered)

    assert merged.action == "https://static/formResponse"
    assert merged.hidden_params == {"fbzx": "1"}
    assert merged.field_names() == ["entry.7", "entry.8"]
    assert merged.hidden_params is not static.hidden_params
