from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime
from typing import Optional, Sequence

from .config import get_settings
from .domain import ConfigurationError
from .logging import configure_logging
from .nlp import DateTimeResolver, IntentClassifier


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Telegram agenda assistant backed by Google Calendar and Tasks.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Start the webhook HTTP server.")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    webhook_parser = subparsers.add_parser("set-webhook", help="Point the Telegram bot at this server's /webhook.")
    webhook_parser.add_argument("--url", default=None, help="Defaults to PUBLIC_BASE_URL + /webhook.")

    parse_parser = subparsers.add_parser("parse", help="Show how a message would be classified and resolved.")
    parse_parser.add_argument("text")

    return parser


def _parse(text: str) -> None:
    settings = get_settings()
    now = datetime.now(settings.assistant.tzinfo)
    classification = IntentClassifier(DateTimeResolver()).classify(text, now)
    resolution = classification.resolution
    print(f"intent: {classification.intent.value}")
    print(f"date:   {resolution.day.isoformat() if resolution.day else '-'}")
    print(f"time:   {resolution.time.strftime('%H:%M') if resolution.time else '-'}")


async def _set_webhook(url: Optional[str]) -> bool:
    from .services.messaging import TelegramMessenger

    telegram = get_settings().telegram
    if not telegram.is_configured:
        raise ConfigurationError("TELEGRAM_BOT_TOKEN is not set.")
    target = url or telegram.webhook_url
    if not target:
        raise ConfigurationError("Pass --url or set PUBLIC_BASE_URL.")
    messenger = TelegramMessenger(telegram.bot_token)
    await messenger.start()
    try:
        return await messenger.set_webhook(target, secret_token=telegram.webhook_secret)
    finally:
        await messenger.stop()


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "parse":
        _parse(args.text)
        return

    settings = get_settings()
    configure_logging(settings.server.log_level)
    logger = logging.getLogger(__name__)

    if args.command == "serve":
        from .services.http import run_server

        host = args.host or settings.server.host
        port = args.port or settings.server.port
        logger.info("agenda-bot listening on %s:%s", host, port)
        run_server(host=host, port=port)
    elif args.command == "set-webhook":
        try:
            ok = asyncio.run(_set_webhook(args.url))
        except ConfigurationError as exc:
            parser.error(str(exc))
        logger.info("Webhook registration %s", "succeeded" if ok else "was rejected")
    else:  # pragma: no cover - argparse enforces choices
        parser.print_help()


if __name__ == "__main__":
    main()
