"""Tests for CLI server resolution and output."""

import io
import struct
from unittest.mock import patch

import pytest
from prompt_toolkit.data_structures import Size
from prompt_toolkit.output.color_depth import ColorDepth
from prompt_toolkit.output.vt100 import Vt100_Output

from bedrockping.cli import main, print_report, resolve_server
from bedrockping.config import AppConfig, ServerConfig
from bedrockping.errors import PingTimeoutError, SendError
from bedrockping.protocol import MAGIC, UnconnectedPong


def _make_config(**overrides) -> AppConfig:
    """Build an AppConfig with sensible defaults."""
    defaults = {
        "default_server": "survival",
        "timeout": 5.0,
        "servers": {
            "survival": ServerConfig(name="Survival", host="10.0.0.112"),
            "creative": ServerConfig(name="Creative", host="10.0.0.114", port=19134),
        },
    }
    defaults.update(overrides)
    return AppConfig(**defaults)


def _make_pong(status: str) -> UnconnectedPong:
    payload = status.encode("utf-8")
    raw = struct.pack(">Bqq16sh", 0x1C, 5000, 99, MAGIC, len(payload)) + payload
    return UnconnectedPong.decode(raw)


class TestResolveServer:
    def test_resolve_by_config_name(self):
        name, server = resolve_server("creative", _make_config())

        assert name == "creative"
        assert server.host == "10.0.0.114"
        assert server.port == 19134

    def test_resolve_host_port(self):
        name, server = resolve_server("192.168.1.1:19133", _make_config())

        assert name == "192.168.1.1:19133"
        assert server.host == "192.168.1.1"
        assert server.port == 19133

    def test_resolve_bare_hostname(self):
        _name, server = resolve_server("bedrock.local", _make_config())

        assert server.host == "bedrock.local"
        assert server.port == 19132

    def test_resolve_bracketed_ipv6(self):
        _name, server = resolve_server("[::1]:19133", _make_config())

        assert server.host == "::1"
        assert server.port == 19133

    def test_resolve_default_server(self):
        name, server = resolve_server(None, _make_config())

        assert name == "survival"
        assert server.host == "10.0.0.112"

    def test_resolve_invalid_port(self):
        with pytest.raises(SendError):
            resolve_server("myhost:notaport", _make_config())

    def test_no_server_and_no_default_exits(self):
        config = _make_config(default_server=None)
        with pytest.raises(SystemExit):
            resolve_server(None, config)


class TestMain:
    def test_raw_output(self, capsys):
        pong = _make_pong("MCPE;§aHello;618;1.20.40;1;10")
        with (
            patch("bedrockping.cli.load_config", return_value=_make_config()),
            patch("bedrockping.cli.PingClient") as client_cls,
        ):
            client_cls.return_value.ping.return_value = pong
            main(["10.0.0.1", "--raw"])

        assert capsys.readouterr().out == "MCPE;§aHello;618;1.20.40;1;10\n"
        client_cls.assert_called_once_with(
            "10.0.0.1", 19132, timeout=5.0, validate_magic=False
        )

    def test_plain_report(self, capsys):
        pong = _make_pong("MCPE;§aHello;618;1.20.40;1;10")
        with (
            patch("bedrockping.cli.load_config", return_value=_make_config()),
            patch("bedrockping.cli.PingClient") as client_cls,
        ):
            client_cls.return_value.ping.return_value = pong
            main(["survival", "--no-color"])

        captured = capsys.readouterr()
        assert "  MOTD: Hello\n" in captured.out
        assert "  Players: 1/10\n" in captured.out
        assert "  Version: 1.20.40 (protocol 618)\n" in captured.out
        assert "incomplete" in captured.err

    def test_cli_flags_reach_client(self):
        pong = _make_pong("MCPE;m;618;1.20.40;1;10;id;lvl;Survival;0;19132;19133")
        with (
            patch("bedrockping.cli.load_config", return_value=_make_config()),
            patch("bedrockping.cli.PingClient") as client_cls,
        ):
            client_cls.return_value.ping.return_value = pong
            main(["creative", "--timeout", "1.5", "--strict-magic", "--raw"])

        client_cls.assert_called_once_with(
            "10.0.0.114", 19134, timeout=1.5, validate_magic=True
        )

    def test_ping_error_exits_nonzero(self, capsys):
        with (
            patch("bedrockping.cli.load_config", return_value=_make_config()),
            patch("bedrockping.cli.PingClient") as client_cls,
        ):
            client_cls.return_value.ping.side_effect = PingTimeoutError("No reply")
            with pytest.raises(SystemExit) as exc_info:
                main(["survival"])

        assert exc_info.value.code == 1
        assert "Error: No reply" in capsys.readouterr().err

    @pytest.mark.parametrize("timeout", ["-1", "0", "soon"])
    def test_bad_timeout_flag_is_usage_error(self, timeout, capsys):
        with (
            patch("bedrockping.cli.load_config", return_value=_make_config()),
            patch("bedrockping.cli.PingClient") as client_cls,
        ):
            with pytest.raises(SystemExit) as exc_info:
                main(["127.0.0.1:1", "--timeout", timeout])

        assert exc_info.value.code == 2
        assert "--timeout" in capsys.readouterr().err
        client_cls.assert_not_called()

    def test_invalid_config_exits_nonzero(self, capsys):
        with patch(
            "bedrockping.cli.load_config",
            side_effect=ValueError("[defaults] timeout must be positive, got -1.0"),
        ):
            with pytest.raises(SystemExit) as exc_info:
                main(["survival"])

        assert exc_info.value.code == 1
        assert "invalid config file" in capsys.readouterr().err

    def test_report_header_shows_address(self, capsys):
        pong = _make_pong("MCPE;m;618;1.20.40;1;10;id;lvl;Survival;0;19132;19133")
        with (
            patch("bedrockping.cli.load_config", return_value=_make_config()),
            patch("bedrockping.cli.PingClient") as client_cls,
        ):
            client_cls.return_value.ping.return_value = pong
            main(["creative", "--no-color"])

        assert capsys.readouterr().out.startswith("creative (10.0.0.114:19134)\n")

    def test_plain_report_drops_escape_sequences(self, capsys):
        pong = _make_pong("MCPE;\x1b[2J\x1b[31mEvil\x07Hello;618;1.20.40;1;10")
        with (
            patch("bedrockping.cli.load_config", return_value=_make_config()),
            patch("bedrockping.cli.PingClient") as client_cls,
        ):
            client_cls.return_value.ping.return_value = pong
            main(["survival", "--no-color"])

        out = capsys.readouterr().out
        assert "\x1b" not in out
        assert "\x07" not in out
        assert "  MOTD: [2J[31mEvilHello\n" in out


class TestColorReport:
    def test_color_report_renders_motd(self):
        stream = io.StringIO()
        output = Vt100_Output(
            stream,
            lambda: Size(rows=24, columns=80),
            term="xterm",
            default_color_depth=ColorDepth.DEPTH_24_BIT,
        )
        pong = _make_pong("MCPE;§aHello;618;1.20.40;1;10;id;lvl;Survival;0;19132;19133")

        print_report("A<b>&", pong, color=True, output=output)

        rendered = stream.getvalue()
        assert "A<b>&" in rendered
        assert "MOTD:" in rendered
        assert "Hello" in rendered
        assert "§a" not in rendered
        # Green from §a and the cyan labels come through as SGR sequences
        assert "\x1b[" in rendered
