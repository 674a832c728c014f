"""Telegram agenda assistant backed by Google Calendar and Google Tasks."""

from __future__ import annotations


def main() -> None:
    from .cli import main as cli_main

    cli_main()
