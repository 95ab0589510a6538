from __future__ import annotations

import argparse
import asyncio
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastapi import HTTPException

from form_bridge.api.errors import to_error_payload
from form_bridge.browser.renderer import HeadlessRenderer
from form_bridge.core.config import AppConfig
from form_bridge.fetch.client import FormHttpClient
from form_bridge.inspection.service import FormInspectionService
from form_bridge.submission.service import FormSubmissionService


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def load_json_argument(raw_json_or_path: str) -> dict[str, Any]:
    """Read a JSON object from a file path or a raw JSON string."""
    possible_path = Path(raw_json_or_path)
    try:
        if possible_path.exists() and possible_path.is_file():
            payload = json.loads(possible_path.read_text(encoding="utf-8"))
        else:
            payload = json.loads(raw_json_or_path)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON input: {exc}") from exc
    if not isinstance(payload, dict):
        raise SystemExit("Input JSON must be an object.")
    return payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspect a public question-list form or submit answers to it."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    inspect_cmd = commands.add_parser("inspect", help="Print the extracted field schema.")
    inspect_cmd.add_argument("url", help="Public form view URL.")
    inspect_cmd.add_argument(
        "--no-render",
        action="store_true",
        help="Skip the headless-browser fallback even when the static parse looks incomplete.",
    )

    submit_cmd = commands.add_parser("submit", help="Submit answers to a form action URL.")
    submit_cmd.add_argument("--action", required=True, help="Form response endpoint.")
    submit_cmd.add_argument(
        "--answers",
        required=True,
        help="Answers JSON object. Either a file path or a raw JSON string.",
    )
    submit_cmd.add_argument("--fbzx", default="", help="Session token from inspection.")
    submit_cmd.add_argument(
        "--hidden",
        default="",
        help="Hidden params JSON object. Either a file path or a raw JSON string.",
    )
    submit_cmd.add_argument("--origin-view-url", default="", help="Referer for the POST.")
    return parser


async def _run_inspect(args: argparse.Namespace, config: AppConfig, client: FormHttpClient) -> dict[str, Any]:
    renderer = HeadlessRenderer(config.render)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="playwright-sync")
    loop = asyncio.get_running_loop()

    async def run_blocking(fn, *a, **kw):
        return await loop.run_in_executor(None, partial(fn, *a, **kw))

    async def run_browser_call(fn, *a, **kw):
        return await loop.run_in_executor(executor, partial(fn, *a, **kw))

    render_enabled = config.render.enabled and not args.no_render
    service = FormInspectionService(
        fetch_text=client.fetch_text,
        run_blocking=run_blocking,
        run_browser_call=run_browser_call,
        render_form_markup=renderer.render_form_markup if render_enabled else None,
        min_fields=config.inspect.min_fields,
    )
    try:
        result = await service.inspect(args.url)
        return result.to_dict()
    finally:
        await run_browser_call(renderer.shutdown)
        executor.shutdown(wait=True)


async def _run_submit(args: argparse.Namespace, config: AppConfig, client: FormHttpClient) -> dict[str, Any]:
    loop = asyncio.get_running_loop()

    async def run_blocking(fn, *a, **kw):
        return await loop.run_in_executor(None, partial(fn, *a, **kw))

    service = FormSubmissionService(
        post_form=client.post_form,
        run_blocking=run_blocking,
        user_agent=client.user_agent,
        debug_excerpt_chars=config.submit.debug_excerpt_chars,
    )
    return await service.submit(
        action=args.action,
        answers=load_json_argument(args.answers),
        fbzx=args.fbzx or None,
        hidden_params=load_json_argument(args.hidden) if args.hidden else None,
        origin_view_url=args.origin_view_url or None,
    )


def main() -> None:
    load_dotenv()
    config = AppConfig.from_env()
    setup_logging(config.logging.level)
    args = build_parser().parse_args()
    client = FormHttpClient(config.fetch)
    runner = _run_inspect if args.command == "inspect" else _run_submit
    try:
        summary = asyncio.run(runner(args, config, client))
    except HTTPException as exc:
        payload = to_error_payload(exc.detail, exc.status_code)
        raise SystemExit(f"{payload['error_code']}: {payload['message']}") from exc
    finally:
        client.close()
    print(json.dumps(summary, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
