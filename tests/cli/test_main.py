from __future__ import annotations

import pytest

from magic_chess.cli.main import parse_args


def test_defaults() -> None:
    args = parse_args([])
    assert args.host == "0.0.0.0"
    assert args.port == 8000
    assert args.log_level == "info"


def test_overrides() -> None:
    args = parse_args(["--host", "127.0.0.1", "--port", "9001", "--log-level", "debug"])
    assert (args.host, args.port, args.log_level) == ("127.0.0.1", 9001, "debug")


def test_unknown_log_level_rejected() -> None:
    with pytest.raises(SystemExit):
        parse_args(["--log-level", "loud"])
