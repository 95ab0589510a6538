"""Shared headless Chromium used to render script-populated forms."""

from __future__ import annotations

import logging
import os
import shutil
from threading import RLock
from typing import Any, Callable

from playwright.sync_api import Browser, Page, Playwright, Route, sync_playwright
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from form_bridge.core.config import RenderConfig
from form_bridge.extraction.dom_extractor import ENTRY_SELECTOR, FORM_SELECTOR

LOGGER = logging.getLogger(__name__)

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--no-zygote",
]


class RenderError(RuntimeError):
    """Raised when the headless pass cannot produce a page at all."""


def _chromium_executable_path() -> str | None:
    explicit = os.getenv("PLAYWRIGHT_CHROMIUM_EXECUTABLE_PATH", "").strip()
    if explicit:
        return explicit
    for candidate in ["chromium", "chromium-browser", "google-chrome", "google-chrome-stable"]:
        found = shutil.which(candidate)
        if found:
            return found
    return None


def _launch_chromium(p: Playwright, *, headless: bool) -> Browser:
    launch_kwargs: dict[str, Any] = {"headless": headless, "args": list(CHROMIUM_ARGS)}
    executable_path = _chromium_executable_path()
    if executable_path:
        launch_kwargs["executable_path"] = executable_path
    return p.chromium.launch(**launch_kwargs)


class HeadlessRenderer:
    """Process-wide browser handle, launched lazily and re-created once on failure.

    All methods must be called from the same worker thread; the Playwright
    sync API is bound to the thread that started it.
    """

    def __init__(
        self,
        config: RenderConfig,
        *,
        playwright_factory: Callable[[], Any] = sync_playwright,
    ) -> None:
        self._config = config
        self._playwright_factory = playwright_factory
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = RLock()

    def _get_or_start_playwright(self) -> Playwright:
        if self._playwright is None:
            self._playwright = self._playwright_factory().start()
        return self._playwright

    def _discard_browser(self) -> None:
        browser, self._browser = self._browser, None
        if browser is None:
            return
        try:
            browser.close()
        except PlaywrightError:
            LOGGER.debug("Ignoring error while closing stale browser.", exc_info=True)

    def _launch(self) -> Browser:
        if self._browser is not None:
            LOGGER.warning("browser_recreated")
        self._discard_browser()
        try:
            self._browser = _launch_chromium(
                self._get_or_start_playwright(), headless=self._config.headless
            )
        except PlaywrightError as exc:
            raise RenderError(f"Failed launching Chromium: {exc}") from exc
        LOGGER.info("browser_launched")
        return self._browser

    def acquire_browser(self) -> Browser:
        """Return a connected browser, launching one if needed."""
        with self._lock:
            if self._browser is not None and self._browser.is_connected():
                return self._browser
            return self._launch()

    def _open_page(self) -> Page:
        browser = self.acquire_browser()
        try:
            return browser.new_page()
        except PlaywrightError:
            LOGGER.warning("browser_page_open_failed", exc_info=True)
        with self._lock:
            browser = self._launch()
        try:
            return browser.new_page()
        except PlaywrightError as exc:
            raise RenderError(f"Failed opening page: {exc}") from exc

    def _block_heavy_resources(self, route: Route) -> None:
        if route.request.resource_type in self._config.blocked_resource_types:
            route.abort()
            return
        route.continue_()

    def _wait_quietly(self, page: Page, selector: str, timeout_ms: int) -> None:
        try:
            page.wait_for_selector(selector, timeout=timeout_ms)
        except PlaywrightTimeoutError:
            LOGGER.info("Selector %s not present after %sms; continuing.", selector, timeout_ms)
        except PlaywrightError as exc:
            raise RenderError(f"Page crashed while waiting for {selector}: {exc}") from exc

    def render_form_markup(self, url: str) -> str:
        """Render ``url`` and return the form's outer HTML ("" when absent).

        Raises:
            RenderError: browser could not be started, navigation failed or
                the page died mid-render.
        """
        page = self._open_page()
        try:
            try:
                page.route("**/*", self._block_heavy_resources)
            except PlaywrightError as exc:
                raise RenderError(f"Failed installing request filter: {exc}") from exc
            try:
                page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=self._config.navigation_timeout_ms,
                )
            except PlaywrightError as exc:
                raise RenderError(f"Load failed for URL: {url}. {exc}") from exc
            self._wait_quietly(page, FORM_SELECTOR, self._config.form_wait_timeout_ms)
            self._wait_quietly(page, ENTRY_SELECTOR, self._config.entry_wait_timeout_ms)
            try:
                return str(page.eval_on_selector(FORM_SELECTOR, "el => el.outerHTML") or "")
            except PlaywrightError:
                return ""
        finally:
            try:
                page.close()
            except PlaywrightError:
                LOGGER.warning("Failed closing render page.", exc_info=True)

    def shutdown(self) -> None:
        """Close browser and stop the Playwright driver if running."""
        with self._lock:
            self._discard_browser()
            playwright, self._playwright = self._playwright, None
        if playwright is not None:
            playwright.stop()
