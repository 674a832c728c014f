"""
Tests for the command-line entry point.
"""

import pytest

from agenda_bot.cli import build_parser, main


def test_parse_prints_classification(capsys):
    main(["parse", "Reunión con Ana el 20/10 a las 16:30"])

    output = capsys.readouterr().out
    assert "intent: meeting" in output
    assert "-10-20" in output
    assert "time:   16:30" in output


def test_parse_without_date(capsys):
    main(["parse", "comprar pan"])

    output = capsys.readouterr().out
    assert "intent: default_task" in output
    assert "date:   -" in output


def test_serve_options():
    args = build_parser().parse_args(["serve", "--port", "9000"])

    assert args.command == "serve"
    assert args.port == 9000
    assert args.host is None


def test_command_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
