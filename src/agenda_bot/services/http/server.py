from __future__ import annotations

import asyncio
import html
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, FastAPI, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import ValidationError

from ...domain import ConfigurationError, DownstreamFailure, OAuthExchangeError
from ...logging import configure_logging
from ...orchestrator import replies
from .models import TelegramUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


def _context(request: Request) -> Any:
    return request.app.state.context


async def process_update(context: Any, update: TelegramUpdate) -> None:
    """Run one Telegram update through the orchestrator and send the reply."""

    message = update.message
    if message is None or not message.text:
        return
    chat_id = str(message.chat.id)
    logger.info("Update %s from chat %s", update.update_id, chat_id)

    try:
        reply = await run_in_threadpool(context.orchestrator.handle, chat_id, message.sender_id, message.text)
    except Exception:  # noqa: BLE001
        logger.exception("Unhandled error while processing update %s", update.update_id)
        reply = replies.GENERIC_FAILURE
    if reply is None:
        return

    try:
        await context.messenger.send_message(chat_id, reply)
    except DownstreamFailure:
        logger.exception("Could not deliver reply to chat %s", chat_id)


@router.get("/")
async def root() -> PlainTextResponse:
    return PlainTextResponse("agenda-bot is alive")


@router.get("/health")
async def health() -> PlainTextResponse:
    return PlainTextResponse("ok")


@router.post("/webhook")
async def webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_telegram_bot_api_secret_token: Optional[str] = Header(default=None),
) -> JSONResponse:
    context = _context(request)
    secret = context.settings.telegram.webhook_secret
    if secret and x_telegram_bot_api_secret_token != secret:
        logger.warning("Rejected webhook call with a bad secret token")
        raise HTTPException(status_code=403, detail="invalid secret token")

    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Ignoring update whose body is not JSON")
        return JSONResponse({"ok": True})

    try:
        update = TelegramUpdate.model_validate(payload)
    except ValidationError:
        logger.warning("Ignoring malformed update: %s", payload)
        return JSONResponse({"ok": True})

    background_tasks.add_task(process_update, context, update)
    return JSONResponse({"ok": True})


@router.get("/auth/google/login")
async def google_login(state: str, request: Request) -> RedirectResponse:
    auth = _context(request).auth
    if not auth.is_known_state(state):
        raise HTTPException(status_code=400, detail="El enlace de inicio de sesión expiró. Usa /login de nuevo.")
    try:
        url = auth.authorization_url(state)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return RedirectResponse(url)


@router.get("/auth/google/callback")
async def google_callback(
    request: Request,
    background_tasks: BackgroundTasks,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
) -> HTMLResponse:
    if error:
        return HTMLResponse(f"<p>Google rechazó el acceso: {html.escape(error)}</p>", status_code=400)
    if not code or not state:
        raise HTTPException(status_code=400, detail="Faltan code o state.")

    context = _context(request)
    try:
        login = await run_in_threadpool(context.auth.exchange_code, code, state)
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except OAuthExchangeError as exc:
        logger.warning("OAuth exchange failed: %s", exc)
        raise HTTPException(status_code=502, detail="No se pudo conectar la cuenta de Google.") from exc

    background_tasks.add_task(_notify, context, login.chat_id, replies.LOGIN_COMPLETED)
    return HTMLResponse("<p>Cuenta de Google conectada. Ya puedes volver a Telegram.</p>")


async def _notify(context: Any, chat_id: str, text: str) -> None:
    try:
        await context.messenger.send_message(chat_id, text)
    except DownstreamFailure:
        logger.exception("Could not notify chat %s", chat_id)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    if app.state.context is None:
        from ..context import ServiceContext

        context = ServiceContext()
        configure_logging(context.settings.server.log_level)
        app.state.context = context
    await app.state.context.messenger.start()
    try:
        yield
    finally:
        await app.state.context.messenger.stop()


def create_app(context: Any = None) -> FastAPI:
    app = FastAPI(title="agenda-bot", version="0.1.0", lifespan=_lifespan)
    app.state.context = context
    app.include_router(router)
    return app


app = create_app()


def run_server(host: str = "0.0.0.0", port: int = 8080) -> None:
    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    config = Config()
    config.bind = [f"{host}:{port}"]
    asyncio.run(serve(app, config))
