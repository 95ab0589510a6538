"""Form inspection: static parse with headless-render fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence
from urllib.parse import urlparse

from playwright.sync_api import Error as PlaywrightError

from form_bridge.api.errors import ApiError, ApiErrorCode
from form_bridge.browser.renderer import RenderError
from form_bridge.extraction.completeness import (
    DEFAULT_LABEL_RULES,
    DEFAULT_MIN_FIELDS,
    LabelRule,
    missing_label_roles,
    needs_rendered_pass,
)
from form_bridge.extraction.dom_extractor import (
    extract_form_schema_from_html,
    wrap_form_fragment,
)
from form_bridge.extraction.models import FormSchema
from form_bridge.extraction.reconcile import reconcile_schemas
from form_bridge.fetch.client import UpstreamFetchError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class InspectionResult:
    """Final schema of one inspection plus request echo."""

    schema: FormSchema
    origin_view_url: str
    rendered: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.schema.to_dict(),
            "origin_view_url": self.origin_view_url,
            "rendered": self.rendered,
        }


def validate_target_url(url: str | None) -> str:
    """Return trimmed absolute http(s) url or raise a client error."""
    target = (url or "").strip()
    if not target:
        raise ApiError.bad_request(ApiErrorCode.MISSING_TARGET_URL, "Missing ?url")
    parsed = urlparse(target)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ApiError.bad_request(
            ApiErrorCode.INVALID_TARGET_URL,
            f"Target URL must be an absolute http(s) URL: {target}",
        )
    return target


class FormInspectionService:
    """Fetch, extract, decide on fallback, render and reconcile."""

    def __init__(
        self,
        *,
        fetch_text: Callable[[str], str],
        run_blocking: Callable[..., Awaitable[Any]],
        run_browser_call: Callable[..., Awaitable[Any]],
        render_form_markup: Callable[[str], str] | None,
        label_rules: Sequence[LabelRule] = DEFAULT_LABEL_RULES,
        min_fields: int = DEFAULT_MIN_FIELDS,
    ) -> None:
        """Initialize service with explicit collaborators.

        ``render_form_markup`` may be ``None`` to disable the rendered pass.
        """
        self._fetch_text = fetch_text
        self._run_blocking = run_blocking
        self._run_browser_call = run_browser_call
        self._render_form_markup = render_form_markup
        self._label_rules = tuple(label_rules)
        self._min_fields = min_fields

    async def inspect(self, url: str | None) -> InspectionResult:
        """Return the reconciled schema for the form at ``url``."""
        target = validate_target_url(url)
        try:
            html = await self._run_blocking(self._fetch_text, target)
        except UpstreamFetchError as exc:
            raise ApiError.upstream(ApiErrorCode.UPSTREAM_FETCH_FAILED, exc) from exc

        static = extract_form_schema_from_html(html)
        schema = static
        rendered = False
        if needs_rendered_pass(static, self._label_rules, min_fields=self._min_fields):
            LOGGER.info(
                "static_pass_insufficient",
                extra={
                    "target_url": target,
                    "field_count": len(static.fields),
                    "missing_roles": ",".join(
                        missing_label_roles(static, self._label_rules)
                    ),
                },
            )
            rendered_schema = await self.render_fallback(target)
            rendered = not rendered_schema.is_empty
            schema = reconcile_schemas(static, rendered_schema)

        LOGGER.info(
            "form_inspected",
            extra={
                "target_url": target,
                "action": schema.action,
                "rendered": rendered,
                "field_count": len(schema.fields),
            },
        )
        return InspectionResult(schema=schema, origin_view_url=target, rendered=rendered)

    async def render_fallback(self, url: str) -> FormSchema:
        """Extract the schema from the rendered form; empty on any render failure."""
        if self._render_form_markup is None:
            return FormSchema()
        try:
            form_html = await self._run_browser_call(self._render_form_markup, url)
        except (RenderError, PlaywrightError):
            LOGGER.warning("render_pass_failed", exc_info=True, extra={"target_url": url})
            return FormSchema()
        if not form_html:
            return FormSchema()
        return extract_form_schema_from_html(wrap_form_fragment(form_html))
