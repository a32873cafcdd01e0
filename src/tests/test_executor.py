"""
Executor Tests

The UDP executor is exercised against a local asyncio datagram responder.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from dns_resolver.core import (
    DNSClass,
    DNSHeader,
    DNSMessage,
    DNSRecordType,
    DNSResourceRecord,
    ProtocolError,
    Query,
    Resolver,
    RetryExecutor,
    TransportError,
    UDPExecutor,
    create_a_record,
    create_cname_record,
)
from dns_resolver.core.executor import split_nameserver


class Responder(asyncio.DatagramProtocol):
    """Answers each datagram with handler(request_bytes)"""

    def __init__(self, handler):
        self.handler = handler
        self.transport = None
        self.requests = []

    def connection_made(self, transport):
        self.transport = transport

    def datagram_received(self, data, addr):
        self.requests.append(data)
        reply = self.handler(data)
        if reply is not None:
            self.transport.sendto(reply, addr)


async def start_responder(handler):
    loop = asyncio.get_running_loop()
    transport, protocol = await loop.create_datagram_endpoint(
        lambda: Responder(handler), local_addr=("127.0.0.1", 0)
    )
    port = transport.get_extra_info("sockname")[1]
    return transport, protocol, port


def answer_with(*records, transaction_offset=0, qr=True):
    def handler(data):
        request = DNSMessage.from_bytes(data)
        header = DNSHeader(
            transaction_id=(request.header.transaction_id + transaction_offset) % 65536,
            qr=qr,
            ra=True,
        )
        return DNSMessage(
            header=header, questions=request.questions, answers=list(records)
        ).to_bytes()

    return handler


class TestSplitNameserver:
    """Test nameserver address parsing"""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("8.8.8.8", ("8.8.8.8", 53)),
            ("8.8.8.8:5353", ("8.8.8.8", 5353)),
            ("2001:db8::1", ("2001:db8::1", 53)),
            ("[2001:db8::1]:5353", ("2001:db8::1", 5353)),
            ("[::1]", ("::1", 53)),
        ],
    )
    def test_split(self, value, expected):
        assert split_nameserver(value) == expected


class TestUDPExecutor:
    """Test single-shot UDP queries"""

    @pytest.mark.asyncio
    async def test_query_round_trip(self):
        """The executor sends the question and parses the reply"""
        transport, protocol, port = await start_responder(
            answer_with(
                create_cname_record("www.example.com.", "example.com."),
                create_a_record("example.com.", "10.0.0.1"),
            )
        )
        try:
            executor = UDPExecutor(port=port, timeout=2.0)
            response = await executor.query(
                "127.0.0.1", Query("www.example.com", DNSRecordType.A)
            )
        finally:
            transport.close()

        request = DNSMessage.from_bytes(protocol.requests[0])
        assert request.header.rd
        assert not request.header.qr
        assert request.questions[0].name == "www.example.com."
        assert request.questions[0].qtype == DNSRecordType.A
        assert [r.data for r in response.answers] == ["example.com.", "10.0.0.1"]

    @pytest.mark.asyncio
    async def test_nameserver_port_overrides_default(self):
        transport, protocol, port = await start_responder(answer_with())
        try:
            executor = UDPExecutor(port=1, timeout=2.0)
            response = await executor.query(
                f"127.0.0.1:{port}", Query("example.com", DNSRecordType.A)
            )
        finally:
            transport.close()

        assert response.answers == []
        assert len(protocol.requests) == 1

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self):
        """No reply within the timeout is a transport failure"""
        transport, _, port = await start_responder(lambda data: None)
        try:
            executor = UDPExecutor(port=port, timeout=0.1)
            with pytest.raises(TransportError, match="timed out"):
                await executor.query("127.0.0.1", Query("example.com", DNSRecordType.A))
        finally:
            transport.close()

    @pytest.mark.asyncio
    async def test_transaction_id_mismatch(self):
        transport, _, port = await start_responder(answer_with(transaction_offset=1))
        try:
            executor = UDPExecutor(port=port, timeout=2.0)
            with pytest.raises(ProtocolError, match="Transaction ID mismatch"):
                await executor.query("127.0.0.1", Query("example.com", DNSRecordType.A))
        finally:
            transport.close()

    @pytest.mark.asyncio
    async def test_malformed_reply(self):
        transport, _, port = await start_responder(lambda data: b"\x00\x01")
        try:
            executor = UDPExecutor(port=port, timeout=2.0)
            with pytest.raises(ProtocolError, match="Malformed"):
                await executor.query("127.0.0.1", Query("example.com", DNSRecordType.A))
        finally:
            transport.close()

    @pytest.mark.asyncio
    async def test_reply_without_response_flag(self):
        transport, _, port = await start_responder(answer_with(qr=False))
        try:
            executor = UDPExecutor(port=port, timeout=2.0)
            with pytest.raises(ProtocolError, match="not a response"):
                await executor.query("127.0.0.1", Query("example.com", DNSRecordType.A))
        finally:
            transport.close()

    @pytest.mark.asyncio
    async def test_transaction_ids_change(self):
        executor = UDPExecutor()
        first = executor._build_request(Query("example.com", DNSRecordType.A))
        second = executor._build_request(Query("example.com", DNSRecordType.A))

        assert first.header.transaction_id != second.header.transaction_id

    @pytest.mark.asyncio
    async def test_resolver_over_udp(self):
        """End to end: resolver + UDP executor + local responder"""
        transport, _, port = await start_responder(
            answer_with(
                create_cname_record("www.example.com.", "cdn.example.net."),
                create_a_record("cdn.example.net.", "192.0.2.10"),
            )
        )
        try:
            resolver = Resolver("127.0.0.1", UDPExecutor(port=port, timeout=2.0))
            address = await resolver.resolve("www.example.com")
        finally:
            transport.close()

        assert address == "192.0.2.10"


class TestRetryExecutor:
    """Test retry on transport failures"""

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self):
        response = DNSMessage(header=DNSHeader(transaction_id=1, qr=True))
        inner = AsyncMock()
        inner.query.side_effect = [TransportError("lost"), response]

        result = await RetryExecutor(inner, retries=2).query(
            "8.8.8.8", Query("example.com", DNSRecordType.A)
        )

        assert result is response
        assert inner.query.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_retries(self):
        inner = AsyncMock()
        inner.query.side_effect = TransportError("lost")

        with pytest.raises(TransportError):
            await RetryExecutor(inner, retries=2).query(
                "8.8.8.8", Query("example.com", DNSRecordType.A)
            )

        assert inner.query.await_count == 3

    @pytest.mark.asyncio
    async def test_protocol_errors_are_not_retried(self):
        inner = AsyncMock()
        inner.query.side_effect = ProtocolError("bad reply")

        with pytest.raises(ProtocolError):
            await RetryExecutor(inner, retries=5).query(
                "8.8.8.8", Query("example.com", DNSRecordType.A)
            )

        assert inner.query.await_count == 1


class TestMalformedReplies:
    """Malformed record data is rejected before it reaches the resolver"""

    @pytest.mark.asyncio
    async def test_short_a_record_is_protocol_error(self):
        bad_record = DNSResourceRecord(
            "example.com.", DNSRecordType.A, DNSClass.IN, 60, b"\xc0\x00\x02"
        )
        transport, _, port = await start_responder(answer_with(bad_record))
        try:
            resolver = Resolver("127.0.0.1", UDPExecutor(port=port, timeout=2.0))
            with pytest.raises(ProtocolError, match="Invalid A record"):
                await resolver.resolve("example.com")
        finally:
            transport.close()
