"""Static DOM extraction of question-list forms into a field schema."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Any

from bs4 import BeautifulSoup, Tag

from form_bridge.extraction.models import FieldOption, FormField, FormSchema

FORM_SELECTOR = 'form[action*="formResponse"]'
ENTRY_SELECTOR = '[name^="entry."]'
SENTINEL_SUFFIX = "_sentinel"
HTML_PARSER = "html.parser"

_ENTRY_NAME_RE = re.compile(r"^entry\.\d+")


def _attr(element: Tag | None, name: str) -> str:
    """Return attribute value as plain string ("" when missing)."""
    if element is None:
        return ""
    value: Any = element.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(str(item) for item in value)
    return str(value)


def _text(element: Tag | None) -> str:
    if element is None:
        return ""
    return element.get_text().strip()


def is_entry_name(name: str) -> bool:
    """Return ``True`` for addressable entry names (sentinels excluded)."""
    return bool(_ENTRY_NAME_RE.match(name)) and not name.endswith(SENTINEL_SUFFIX)


def sentinel_base_name(name: str) -> str:
    """Strip the sentinel suffix, returning "" for non-sentinel names."""
    if not name.endswith(SENTINEL_SUFFIX) or not _ENTRY_NAME_RE.match(name):
        return ""
    return name[: -len(SENTINEL_SUFFIX)]


def select_form_scope(document: Tag) -> Tag:
    """Pick the submission form, else the first form, else the whole tree."""
    form = document.select_one(FORM_SELECTOR)
    if form is not None:
        return form
    form = document.find("form")
    if isinstance(form, Tag):
        return form
    return document


def _question_heading(item: Tag | None) -> str:
    if item is None:
        return ""
    return _text(item.select_one('div[role="heading"]'))


def resolve_field_label(element: Tag) -> str:
    """Resolve human label for an input element.

    Order: heading of the enclosing list item, first ``<label>`` of the
    nearest ``<div>``, ``aria-label``, then the element name.
    """
    heading = _question_heading(element.find_parent(attrs={"role": "listitem"}))
    if heading:
        return heading

    container = element.find_parent("div")
    if container is not None:
        label = _text(container.find("label"))
        if label:
            return label

    return _attr(element, "aria-label").strip() or _attr(element, "name")


def _field_type(element: Tag) -> str:
    explicit = _attr(element, "type").strip().lower()
    if explicit:
        return explicit
    if element.name in {"textarea", "select"}:
        return element.name
    return "text"


def _is_required(element: Tag) -> bool:
    return _attr(element, "aria-required") == "true" or element.has_attr("required")


def _select_options(element: Tag) -> list[FieldOption]:
    return [
        FieldOption(value=_attr(option, "value"), label=_text(option))
        for option in element.find_all("option")
    ]


def _collect_hidden_params(scope: Tag) -> dict[str, str]:
    hidden: dict[str, str] = {}
    for element in scope.select('input[type="hidden"]'):
        name = _attr(element, "name")
        if not name:
            continue
        hidden[name] = _attr(element, "value")
    return hidden


def _native_radio_option(element: Tag) -> FieldOption | None:
    value = _attr(element, "value")
    if not value:
        return None
    label = _text(element.find_parent("label")) or _attr(element, "aria-label").strip()
    return FieldOption(value=value, label=label or value)


def _merge_native_radio(
    existing: FormField | None, element: Tag, name: str, label: str, required: bool
) -> FormField:
    """Fold one ``<input type="radio">`` into the field its siblings started."""
    option = _native_radio_option(element)
    if existing is None or existing.type != "radio":
        return FormField(
            name=name,
            type="radio",
            label=label,
            required=required,
            options=[option] if option else [],
        )
    options = list(existing.options)
    if option is not None and option.value not in {o.value for o in options}:
        options.append(option)
    return replace(existing, required=existing.required or required, options=options)


def _collect_entry_fields(scope: Tag) -> dict[str, FormField]:
    fields: dict[str, FormField] = {}
    for element in scope.select(ENTRY_SELECTOR):
        name = _attr(element, "name")
        if not name or not is_entry_name(name):
            continue
        label = resolve_field_label(element)
        required = _is_required(element)
        if element.name == "select":
            fields[name] = FormField(
                name=name,
                type="select",
                label=label,
                required=required,
                options=_select_options(element),
            )
        elif _field_type(element) == "radio":
            fields[name] = _merge_native_radio(fields.get(name), element, name, label, required)
        else:
            fields[name] = FormField(
                name=name,
                type=_field_type(element),
                label=label,
                required=required,
            )
    return fields


def _radio_options(item: Tag) -> list[FieldOption]:
    options: list[FieldOption] = []
    for radio in item.select('[role="radio"]'):
        label = _attr(radio, "aria-label").strip() or _text(radio)
        if label:
            options.append(FieldOption(value=label, label=label))
    return options


def _apply_sentinel_groups(scope: Tag, fields: dict[str, FormField]) -> None:
    """Turn sentinel-backed ARIA radio groups into radio fields in place."""
    for sentinel in scope.select(f'input{ENTRY_SELECTOR}[name$="{SENTINEL_SUFFIX}"]'):
        sentinel_name = _attr(sentinel, "name")
        base = sentinel_base_name(sentinel_name)
        if not base:
            continue
        item = sentinel.find_parent(attrs={"role": "listitem"})
        if item is None:
            continue
        options = _radio_options(item)
        if not options:
            continue
        group = item.select_one('[role="radiogroup"]')
        required = _attr(group, "aria-required") == "true"

        existing = fields.get(base)
        if existing is not None:
            fields[base] = replace(
                existing, type="radio", options=options, required=required
            )
        else:
            fields[base] = FormField(
                name=base,
                type="radio",
                label=_question_heading(item) or sentinel_name,
                required=required,
                options=options,
            )


def extract_form_schema(document: Tag) -> FormSchema:
    """Extract action, hidden params and entry fields from a parsed tree."""
    scope = select_form_scope(document)
    fields = _collect_entry_fields(scope)
    _apply_sentinel_groups(scope, fields)
    return FormSchema(
        action=_attr(scope, "action") if scope.name == "form" else "",
        hidden_params=_collect_hidden_params(scope),
        fields=list(fields.values()),
    )


def extract_form_schema_from_html(markup: str) -> FormSchema:
    """Parse markup and run :func:`extract_form_schema` over it."""
    return extract_form_schema(BeautifulSoup(markup or "", HTML_PARSER))


def wrap_form_fragment(form_html: str) -> str:
    """Wrap a serialized form into a minimal document shell."""
    return f"<html><body>{form_html}</body></html>"
