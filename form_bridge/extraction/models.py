"""Field schema produced by form extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

FBZX_PARAM = "fbzx"
CHOICE_FIELD_TYPES = frozenset({"select", "radio"})


@dataclass(frozen=True)
class FieldOption:
    """One selectable choice: submitted value plus display label."""

    value: str
    label: str


@dataclass
class FormField:
    """One question/input of the form, addressed by its entry name."""

    name: str
    type: str
    label: str
    required: bool = False
    options: list[FieldOption] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "label": self.label,
            "required": self.required,
        }
        if self.type in CHOICE_FIELD_TYPES:
            payload["options"] = [
                {"value": option.value, "label": option.label}
                for option in self.options
            ]
        return payload


@dataclass
class FormSchema:
    """Extraction result for a single form page."""

    action: str = ""
    hidden_params: dict[str, str] = field(default_factory=dict)
    fields: list[FormField] = field(default_factory=list)

    @property
    def fbzx(self) -> str:
        """Session token the submit endpoint expects back verbatim."""
        return self.hidden_params.get(FBZX_PARAM, "")

    @property
    def is_empty(self) -> bool:
        return not self.action and not self.hidden_params and not self.fields

    def field_names(self) -> list[str]:
        return [item.name for item in self.fields]

    def to_dict(self) -> dict[str, Any]:
        """Return JSON-ready representation of the schema."""
        return {
            "action": self.action,
            "fbzx": self.fbzx,
            "fields": [item.to_dict() for item in self.fields],
            "hidden_params": dict(self.hidden_params),
        }
