"""Heuristic deciding whether a static extraction needs a rendered re-parse."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from form_bridge.extraction.models import FormSchema

DEFAULT_MIN_FIELDS = 3


@dataclass(frozen=True)
class LabelRule:
    """Well-known question whose label must be present in a complete form."""

    role: str
    pattern: re.Pattern[str]

    @classmethod
    def compile(cls, role: str, pattern: str) -> "LabelRule":
        return cls(role=role, pattern=re.compile(pattern, re.I))

    def matches_any(self, labels: Iterable[str]) -> bool:
        return any(self.pattern.search(label or "") for label in labels)


DEFAULT_LABEL_RULES: tuple[LabelRule, ...] = (
    LabelRule.compile("identifier", r"(id|เลขประจำตัว)"),
    LabelRule.compile("full_name", r"(ชื่อ[-\s]?นามสกุล|full\s*name)"),
    LabelRule.compile("nickname", r"(ชื่อเล่น|nickname)"),
)


def missing_label_roles(
    schema: FormSchema, rules: Sequence[LabelRule] = DEFAULT_LABEL_RULES
) -> list[str]:
    """Return roles of rules that no field label satisfies."""
    labels = [item.label for item in schema.fields]
    return [rule.role for rule in rules if not rule.matches_any(labels)]


def needs_rendered_pass(
    schema: FormSchema,
    rules: Sequence[LabelRule] = DEFAULT_LABEL_RULES,
    *,
    min_fields: int = DEFAULT_MIN_FIELDS,
) -> bool:
    """Return ``True`` when the static pass looks incomplete.

    Some forms only populate their question list after client-side
    scripts run; missing well-known questions is used as a cheap signal
    for that. False positives only cost an extra render.
    """
    if not schema.action:
        return True
    if len(schema.fields) < min_fields:
        return True
    return bool(missing_label_roles(schema, rules))
