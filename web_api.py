from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from form_bridge.api.form_routes import FormRouteDeps, register_form_routes
from form_bridge.api.http_setup import register_exception_handlers, register_http_middleware
from form_bridge.browser.renderer import HeadlessRenderer
from form_bridge.core.config import AppConfig
from form_bridge.core.logging import setup_logging
from form_bridge.fetch.client import FormHttpClient
from form_bridge.inspection.service import FormInspectionService
from form_bridge.submission.service import FormSubmissionService

load_dotenv()
APP_CONFIG = AppConfig.from_env()
setup_logging(APP_CONFIG.logging.level)
LOGGER = logging.getLogger(__name__)

HTTP_CLIENT = FormHttpClient(APP_CONFIG.fetch)
RENDERER = HeadlessRenderer(APP_CONFIG.render)
_BROWSER_EXECUTOR = ThreadPoolExecutor(
    max_workers=1, thread_name_prefix="playwright-sync"
)


async def _run_blocking(fn, *args, **kwargs):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(fn, *args, **kwargs))


async def _run_browser_call(fn, *args, **kwargs):
    loop = asyncio.get_running_loop()
    call = partial(fn, *args, **kwargs)
    return await loop.run_in_executor(_BROWSER_EXECUTOR, call)


async def _shutdown_shared_resources() -> None:
    try:
        await _run_browser_call(RENDERER.shutdown)
    except Exception:
        LOGGER.exception("Failed stopping headless renderer.")
    HTTP_CLIENT.close()


def create_app() -> FastAPI:
    app = FastAPI(title="Form Bridge API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=APP_CONFIG.security.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )
    register_http_middleware(app, config=APP_CONFIG, logger=LOGGER)
    register_exception_handlers(app, logger=LOGGER)

    inspection_service = FormInspectionService(
        fetch_text=HTTP_CLIENT.fetch_text,
        run_blocking=_run_blocking,
        run_browser_call=_run_browser_call,
        render_form_markup=(
            RENDERER.render_form_markup if APP_CONFIG.render.enabled else None
        ),
        min_fields=APP_CONFIG.inspect.min_fields,
    )
    submission_service = FormSubmissionService(
        post_form=HTTP_CLIENT.post_form,
        run_blocking=_run_blocking,
        user_agent=HTTP_CLIENT.user_agent,
        debug_excerpt_chars=APP_CONFIG.submit.debug_excerpt_chars,
    )

    register_form_routes(
        app,
        deps=FormRouteDeps(
            config=APP_CONFIG,
            inspection_service=inspection_service,
            submission_service=submission_service,
            on_shutdown=_shutdown_shared_resources,
        ),
    )

    return app


app = create_app()
