"""Async HTTP API for the chat widget.

Uses aiohttp's AppRunner/TCPSite for non-blocking start/stop. Every
response carries CORS headers so the marketing site can call it directly.
"""

from __future__ import annotations

import logging
from typing import Any

from aiohttp import web
from pydantic import ValidationError

from ideate.chat.models import LeadSubmission
from ideate.chat.pipeline import ChatPipeline
from ideate.config import settings

logger = logging.getLogger(__name__)

PIPELINE_KEY = web.AppKey("pipeline", ChatPipeline)

_COMPANY_SIZES = {"small", "medium", "enterprise"}


def _cors_headers() -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Headers": "authorization, content-type",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    }


@web.middleware
async def _cors_middleware(request: web.Request, handler) -> web.StreamResponse:  # noqa: ANN001
    if request.method == "OPTIONS":
        return web.Response(text="ok", headers=_cors_headers())
    response = await handler(request)
    response.headers.update(_cors_headers())
    return response


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def _read_json(request: web.Request) -> dict[str, Any] | None:
    try:
        payload = await request.json()
    except Exception:
        return None
    return payload if isinstance(payload, dict) else None


async def _health(request: web.Request) -> web.Response:
    """GET /health — basic liveness check."""
    return web.json_response({"status": "ok"})


async def _create_session(request: web.Request) -> web.Response:
    pipeline = request.app[PIPELINE_KEY]
    start = await pipeline.start_session()
    return web.json_response(
        {
            "session_id": start.session_id,
            "messages": [m.to_dict() for m in start.messages],
        },
        status=201,
    )


async def _list_messages(request: web.Request) -> web.Response:
    pipeline = request.app[PIPELINE_KEY]
    session_id = request.match_info["session_id"]
    messages = await pipeline.resume_session(session_id)
    if messages is None:
        return _error("unknown session", 404)
    return web.json_response(
        {"session_id": session_id, "messages": [m.to_dict() for m in messages]}
    )


async def _send_message(request: web.Request) -> web.Response:
    pipeline = request.app[PIPELINE_KEY]
    session_id = request.match_info["session_id"]

    payload = await _read_json(request)
    if payload is None:
        return _error("invalid JSON", 400)

    text = str(payload.get("message") or "").strip()
    if not text:
        return _error("message is required", 400)

    company_size = payload.get("company_size")
    if company_size is not None and company_size not in _COMPANY_SIZES:
        return _error("company_size must be small, medium or enterprise", 400)

    industry = payload.get("industry")
    if industry is not None and not isinstance(industry, str):
        return _error("industry must be a string", 400)

    if not await pipeline.session_exists(session_id):
        return _error("unknown session", 404)

    result = await pipeline.handle_message(
        session_id,
        text,
        industry=industry.strip() if industry else None,
        company_size=company_size,
    )
    return web.json_response(result.model_dump(mode="json"))


async def _respond_to_offer(request: web.Request) -> web.Response:
    pipeline = request.app[PIPELINE_KEY]
    session_id = request.match_info["session_id"]

    payload = await _read_json(request)
    if payload is None or not isinstance(payload.get("accept"), bool):
        return _error("accept (boolean) is required", 400)

    if not await pipeline.session_exists(session_id):
        return _error("unknown session", 404)

    outcome = await pipeline.respond_to_offer(session_id, payload["accept"])
    return web.json_response(
        {
            "show_contact_form": outcome.show_contact_form,
            "message": outcome.message.to_dict() if outcome.message else None,
        }
    )


async def _submit_lead(request: web.Request) -> web.Response:
    pipeline = request.app[PIPELINE_KEY]
    session_id = request.match_info["session_id"]

    payload = await _read_json(request)
    if payload is None:
        return _error("invalid JSON", 400)

    try:
        lead = LeadSubmission.model_validate(payload)
    except ValidationError:
        return _error("name and email are required", 400)

    if not await pipeline.session_exists(session_id):
        return _error("unknown session", 404)

    await pipeline.submit_lead(session_id, lead)
    return web.json_response({"ok": True})


def create_web_app(pipeline: ChatPipeline | None = None) -> web.Application:
    """Build the aiohttp Application with routes."""
    app = web.Application(middlewares=[_cors_middleware])
    app[PIPELINE_KEY] = pipeline or ChatPipeline()
    app.router.add_get("/health", _health)
    app.router.add_post("/chat/sessions", _create_session)
    app.router.add_get("/chat/sessions/{session_id}/messages", _list_messages)
    app.router.add_post("/chat/sessions/{session_id}/messages", _send_message)
    app.router.add_post("/chat/sessions/{session_id}/offer", _respond_to_offer)
    app.router.add_post("/chat/sessions/{session_id}/lead", _submit_lead)
    return app


class ChatServer:
    """Manages the aiohttp server lifecycle."""

    def __init__(
        self,
        pipeline: ChatPipeline | None = None,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        self.host = host if host is not None else settings.server_host
        self.port = port if port is not None else settings.server_port
        self._pipeline = pipeline
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        app = create_web_app(self._pipeline)
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("Chat API listening on %s:%d", self.host, self.port)

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Chat API stopped")
