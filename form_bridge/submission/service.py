"""Submission of answer payloads to the form's response endpoint."""

from __future__ import annotations

import logging
import re
from typing import Any, Awaitable, Callable, Mapping
from urllib.parse import urlparse

from form_bridge.api.errors import ApiError, ApiErrorCode
from form_bridge.fetch.client import UpstreamSubmitError
from form_bridge.submission.payload import PayloadInputError, build_submission_payload

LOGGER = logging.getLogger(__name__)

_ERROR_MARKER_RE = re.compile(r"error|bad request", re.I)
ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded;charset=UTF-8"


def build_submit_headers(action: str, origin_view_url: str | None, user_agent: str) -> dict[str, str]:
    """Browser-like headers expected by the response endpoint."""
    parsed = urlparse(action)
    origin = f"{parsed.scheme}://{parsed.netloc}" if parsed.netloc else ""
    referer = (origin_view_url or "").strip() or action.replace("/formResponse", "/viewform")
    headers = {
        "content-type": FORM_CONTENT_TYPE,
        "user-agent": user_agent,
        "referer": referer,
        "accept": ACCEPT_HEADER,
    }
    if origin:
        headers["origin"] = origin
    return headers


def is_successful_submission(status_code: int, body: str) -> bool:
    return status_code == 200 and not _ERROR_MARKER_RE.search(body or "")


class FormSubmissionService:
    """Build payload, POST once, report structured outcome."""

    def __init__(
        self,
        *,
        post_form: Callable[[str, str, Mapping[str, str]], Any],
        run_blocking: Callable[..., Awaitable[Any]],
        user_agent: str,
        debug_excerpt_chars: int = 1200,
    ) -> None:
        self._post_form = post_form
        self._run_blocking = run_blocking
        self._user_agent = user_agent
        self._debug_excerpt_chars = debug_excerpt_chars

    async def submit(
        self,
        *,
        action: str | None,
        answers: Mapping[str, Any] | None,
        fbzx: str | None = None,
        hidden_params: Mapping[str, Any] | None = None,
        origin_view_url: str | None = None,
    ) -> dict[str, Any]:
        """Submit answers; non-200 or error bodies are returned, not raised."""
        try:
            payload = build_submission_payload(
                action=action,
                answers=answers,
                hidden_params=hidden_params,
                fbzx=fbzx,
            )
        except PayloadInputError as exc:
            raise ApiError.bad_request(
                ApiErrorCode.MISSING_ACTION_OR_ANSWERS, str(exc)
            ) from exc

        target = str(action).strip()
        headers = build_submit_headers(target, origin_view_url, self._user_agent)
        try:
            response = await self._run_blocking(
                self._post_form, target, payload.encode(), headers
            )
        except UpstreamSubmitError as exc:
            raise ApiError.upstream(ApiErrorCode.UPSTREAM_SUBMIT_FAILED, exc) from exc

        body = response.text or ""
        ok = is_successful_submission(response.status_code, body)
        LOGGER.info(
            "form_submitted",
            extra={"action": target, "upstream_status": response.status_code},
        )
        return {
            "success": ok,
            "status": response.status_code,
            "debug": None if ok else body[: self._debug_excerpt_chars],
        }
