"""Pooled keep-alive HTTP client for fetching and submitting forms."""

from __future__ import annotations

import logging
from typing import Mapping

import requests
from requests.adapters import HTTPAdapter

from form_bridge.core.config import FetchConfig

LOGGER = logging.getLogger(__name__)


class UpstreamFetchError(RuntimeError):
    """Raised when the target site cannot be fetched."""


class UpstreamSubmitError(RuntimeError):
    """Raised when the submit endpoint cannot be reached."""


def build_session(config: FetchConfig) -> requests.Session:
    """Create a session with a shared keep-alive connection pool."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=config.pool_maxsize, pool_maxsize=config.pool_maxsize)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({"User-Agent": config.user_agent})
    return session


class FormHttpClient:
    """Thin wrapper over ``requests`` used by inspection and submission.

    Connections to the form host are reused through the session's
    keep-alive pool. There is no HTTP/2 and no DNS-resolution cache:
    ``requests`` offers neither, so every new pooled connection resolves
    the host through the system resolver.
    """

    def __init__(self, config: FetchConfig, session: requests.Session | None = None) -> None:
        self._config = config
        self._session = session or build_session(config)

    @property
    def user_agent(self) -> str:
        return self._config.user_agent

    def fetch_text(self, url: str) -> str:
        """Return response body text; raise on network error or non-2xx."""
        try:
            response = self._session.get(
                url,
                timeout=self._config.request_timeout_seconds,
                headers={"User-Agent": self._config.user_agent},
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            LOGGER.warning("form_fetch_failed", extra={"target_url": url})
            raise UpstreamFetchError(str(exc) or f"Failed fetching {url}") from exc
        return response.text

    def post_form(
        self, url: str, body: str, headers: Mapping[str, str]
    ) -> requests.Response:
        """POST an encoded body without raising on HTTP error statuses."""
        try:
            return self._session.post(
                url,
                data=body.encode("utf-8"),
                headers=dict(headers),
                timeout=self._config.submit_timeout_seconds,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            LOGGER.warning("form_submit_failed", extra={"action": url})
            raise UpstreamSubmitError(str(exc) or f"Failed submitting to {url}") from exc

    def close(self) -> None:
        self._session.close()
