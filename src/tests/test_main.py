import pytest

import mpris_ticker.main as ticker_main
from mpris_ticker.main import build_parser, main, run_ticker
from mpris_ticker.utils.config import default_config


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MPRIS_TICKER_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setattr(ticker_main, "setup_logging", lambda *args, **kwargs: None)


def test_parser_options():
    args = build_parser().parse_args(["-f", "[metadata]", "-r", "5", "--renderer", "plain"])
    assert args.command is None
    assert args.display_format == "[metadata]"
    assert args.refresh_ticks == 5
    assert args.renderer == "plain"

    assert build_parser().parse_args(["next-player"]).command == "next-player"
    with pytest.raises(SystemExit):
        build_parser().parse_args(["shuffle"])


def test_command_is_forwarded(monkeypatch):
    sent = []

    def fake_send(token, address):
        sent.append((token, address))
        return True

    monkeypatch.setattr(ticker_main, "send_command", fake_send)
    assert main(["play-pause"]) == 0
    assert sent == [("play-pause", "tcp://127.0.0.1:5557")]


def test_command_without_running_ticker_fails(monkeypatch):
    monkeypatch.setattr(ticker_main, "send_command", lambda token, address: False)
    assert main(["next"]) == 1


def test_invalid_config_exits_with_error(capsys):
    assert main(["-r", "0"]) == 1
    assert "refresh_ticks" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_invalid_format_exits_with_error(capsys):
    config = default_config()
    config['display_format'] = "[prev] [next]"
    assert await run_ticker(config) == 1
    assert "metadata" in capsys.readouterr().err
