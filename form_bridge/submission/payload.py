"""Answer payload construction for form-url-encoded submission."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping
from urllib.parse import urlencode

from form_bridge.extraction.dom_extractor import SENTINEL_SUFFIX
from form_bridge.extraction.models import FBZX_PARAM

_EXACT_ENTRY_RE = re.compile(r"^entry\.\d+$")

DEFAULT_CONTROL_PARAMS: tuple[tuple[str, str], ...] = (
    ("fvv", "1"),
    ("pageHistory", "0"),
    ("submissionTimestamp", "-1"),
)


class PayloadInputError(ValueError):
    """Raised when a payload cannot be built from the given input."""


def _stringify(value: Any) -> str:
    """Render a JSON scalar the way the form host expects to read it back."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class SubmissionPayload:
    """Ordered multimap of form parameters; keys may repeat."""

    items: list[tuple[str, str]] = field(default_factory=list)

    def append(self, key: str, value: Any) -> None:
        self.items.append((key, _stringify(value)))

    def has(self, key: str) -> bool:
        return any(existing == key for existing, _ in self.items)

    def append_missing(self, key: str, value: Any) -> None:
        if not self.has(key):
            self.append(key, value)

    def values(self, key: str) -> list[str]:
        return [value for existing, value in self.items if existing == key]

    def encode(self) -> str:
        return urlencode(self.items)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def build_submission_payload(
    *,
    action: str | None,
    answers: Mapping[str, Any] | None,
    hidden_params: Mapping[str, Any] | None = None,
    fbzx: str | None = None,
) -> SubmissionPayload:
    """Build submit parameters from user answers and extracted form state.

    Raises:
        PayloadInputError: when action or answers are missing.
    """
    if not (action or "").strip() or not answers:
        raise PayloadInputError("Missing action or answers")

    payload = SubmissionPayload()
    for key, value in answers.items():
        if isinstance(value, (list, tuple)):
            for item in value:
                payload.append(key, item)
        else:
            payload.append(key, value)

    for key in answers:
        if _EXACT_ENTRY_RE.match(key):
            payload.append_missing(f"{key}{SENTINEL_SUFFIX}", "")

    for key, value in (hidden_params or {}).items():
        payload.append_missing(key, value)

    if fbzx:
        payload.append_missing(FBZX_PARAM, fbzx)

    for key, value in DEFAULT_CONTROL_PARAMS:
        payload.append_missing(key, value)

    return payload
