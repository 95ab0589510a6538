"""Merge rule for static and rendered extraction results."""

from __future__ import annotations

from form_bridge.extraction.models import FormSchema


def reconcile_schemas(static: FormSchema, rendered: FormSchema) -> FormSchema:
    """Combine two passes; each non-empty rendered part replaces the static one.

    Replacement is wholesale per part (action, hidden map, field list) so the
    result never mixes fields from both sources.
    """
    return FormSchema(
        action=rendered.action or static.action,
        hidden_params=dict(rendered.hidden_params or static.hidden_params),
        fields=list(rendered.fields or static.fields),
    )
