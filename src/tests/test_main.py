"""Tests for the dns-resolve command-line client."""

import os
from unittest.mock import AsyncMock, patch

import pytest
import structlog

from dns_resolver import main as cli
from dns_resolver.core import (
    DNSHeader,
    DNSMessage,
    DNSRecordType,
    RecordNotFound,
    create_ptr_record,
)
from dns_resolver.dns_logging import shutdown_logging


@pytest.fixture(autouse=True)
def clean_environment():
    with patch.dict(os.environ, {}, clear=True):
        yield
    shutdown_logging()
    structlog.reset_defaults()


@pytest.fixture
def resolver():
    fake = AsyncMock()
    with patch.object(cli, "create_resolver", return_value=fake) as factory:
        fake.factory = factory
        yield fake


class TestParser:
    """Test argument parsing"""

    def test_lookup_type_is_case_insensitive(self):
        args = cli.build_parser().parse_args(["lookup", "example.com", "-T", "mx"])

        assert args.qtype == "MX"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestMain:
    """Test command dispatch"""

    @pytest.mark.asyncio
    async def test_resolve_prints_address(self, resolver, capsys):
        resolver.resolve.return_value = "192.0.2.1"

        code = await cli.main(["-s", "1.1.1.1", "resolve", "example.com"])

        assert code == 0
        assert capsys.readouterr().out.strip() == "192.0.2.1"
        resolver.resolve.assert_awaited_once_with("example.com")
        assert resolver.factory.call_args.args[0].nameserver == "1.1.1.1"

    @pytest.mark.asyncio
    async def test_lookup_prints_records(self, resolver, capsys):
        resolver.lookup.return_value = DNSMessage(
            header=DNSHeader(transaction_id=1, qr=True),
            answers=[create_ptr_record("1.2.0.192.in-addr.arpa.", "host.example.")],
        )

        code = await cli.main(["lookup", "1.2.0.192.in-addr.arpa", "--type", "PTR"])

        assert code == 0
        assert capsys.readouterr().out.strip() == (
            "1.2.0.192.in-addr.arpa.\t300\tIN\tPTR\thost.example."
        )
        resolver.lookup.assert_awaited_once_with(
            "1.2.0.192.in-addr.arpa", DNSRecordType.PTR
        )

    @pytest.mark.asyncio
    async def test_reverse(self, resolver, capsys):
        resolver.reverse.return_value = DNSMessage(
            header=DNSHeader(transaction_id=1, qr=True)
        )

        code = await cli.main(["reverse", "192.0.2.1"])

        assert code == 0
        assert capsys.readouterr().out == ""
        resolver.reverse.assert_awaited_once_with("192.0.2.1")

    @pytest.mark.asyncio
    async def test_resolver_error_exit_code(self, resolver, capsys):
        resolver.resolve.side_effect = RecordNotFound(
            "DNS Request did not return valid answer."
        )

        code = await cli.main(["resolve", "missing.example.com"])

        assert code == 1
        assert "did not return valid answer" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_unexpected_error_exit_code(self, resolver):
        resolver.resolve.side_effect = RuntimeError("broken")

        assert await cli.main(["resolve", "example.com"]) == 1

    @pytest.mark.asyncio
    async def test_nameserver_with_port(self, resolver, capsys):
        """-s host:port reaches the resolver factory unchanged"""
        resolver.resolve.return_value = "192.0.2.1"

        code = await cli.main(["-s", "127.0.0.1:5353", "resolve", "example.com"])

        assert code == 0
        assert resolver.factory.call_args.args[0].nameserver == "127.0.0.1:5353"

    @pytest.mark.asyncio
    async def test_invalid_nameserver_exit_code(self, resolver, capsys):
        code = await cli.main(["-s", "bad host!", "resolve", "example.com"])

        assert code == 1
        assert "Invalid nameserver" in capsys.readouterr().err
        resolver.factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_config_file_exit_code(self, resolver, capsys):
        code = await cli.main(["-c", "/non/existent/file.yaml", "resolve", "x.com"])

        assert code == 1
        assert "Configuration file not found" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_invalid_yaml_exit_code(self, resolver, capsys, tmp_path):
        config_file = tmp_path / "resolver.yaml"
        config_file.write_text("invalid: yaml: content: [", encoding="utf-8")

        code = await cli.main(["-c", str(config_file), "resolve", "example.com"])

        assert code == 1
        assert "Failed to load configuration" in capsys.readouterr().err
