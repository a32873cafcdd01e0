"""
Query Executors

An executor sends one Query to one nameserver and returns the parsed reply.
The resolver only depends on the ``Executor`` contract; this module ships:
- UDPExecutor: single round trip over an asyncio datagram endpoint
- RetryExecutor: re-sends on transport failures
"""

import asyncio
import logging
import random
import struct
from abc import ABC, abstractmethod
from typing import Tuple

from .errors import ProtocolError, TransportError
from .message import DNSHeader, DNSMessage
from .query import Query

logger = logging.getLogger(__name__)

DEFAULT_PORT = 53


def split_nameserver(nameserver: str, default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """Split ``host`` or ``host:port`` into its parts.

    Bare IPv6 literals are returned unchanged; use ``[addr]:port`` to give
    an IPv6 nameserver a port.
    """
    if nameserver.startswith("["):
        host, _, rest = nameserver[1:].partition("]")
        if rest.startswith(":"):
            return host, int(rest[1:])
        return host, default_port

    if nameserver.count(":") == 1:
        host, port = nameserver.rsplit(":", 1)
        return host, int(port)

    return nameserver, default_port


class Executor(ABC):
    """Sends a query to a nameserver and returns the parsed response"""

    @abstractmethod
    async def query(self, nameserver: str, query: Query) -> DNSMessage:
        """Run ``query`` against ``nameserver``.

        Raises:
            TransportError: If the nameserver could not be reached
            ProtocolError: If the reply is not a valid answer to the query
        """


class _DNSProtocol(asyncio.DatagramProtocol):
    def __init__(self, future: asyncio.Future):
        self.future = future

    def datagram_received(self, data, addr):
        if not self.future.done():
            self.future.set_result(data)

    def error_received(self, exc):
        if not self.future.done():
            self.future.set_exception(exc)


class UDPExecutor(Executor):
    """Single-shot UDP executor"""

    def __init__(self, port: int = DEFAULT_PORT, timeout: float = 5.0):
        self.port = port
        self.timeout = timeout
        self._transaction_counter = random.randrange(65536)

    def _next_transaction_id(self) -> int:
        self._transaction_counter = (self._transaction_counter + 1) % 65536
        return self._transaction_counter

    def _build_request(self, query: Query) -> DNSMessage:
        header = DNSHeader(
            transaction_id=self._next_transaction_id(),
            qr=False,
            rd=True,  # Recursion desired
            question_count=1,
        )
        return DNSMessage(header=header, questions=[query.to_question()])

    async def query(self, nameserver: str, query: Query) -> DNSMessage:
        host, port = split_nameserver(nameserver, self.port)
        request = self._build_request(query)

        loop = asyncio.get_running_loop()
        response_future = loop.create_future()

        try:
            transport, _ = await loop.create_datagram_endpoint(
                lambda: _DNSProtocol(response_future), remote_addr=(host, port)
            )
        except OSError as e:
            raise TransportError(f"Cannot reach {host}:{port}: {e}") from e

        try:
            transport.sendto(request.to_bytes())

            try:
                response_data = await asyncio.wait_for(
                    response_future, timeout=self.timeout
                )
            except asyncio.TimeoutError:
                raise TransportError(
                    f"Query to {host}:{port} timed out after {self.timeout}s"
                ) from None
            except OSError as e:
                raise TransportError(f"Query to {host}:{port} failed: {e}") from e
        finally:
            transport.close()

        try:
            response = DNSMessage.from_bytes(response_data)
        except (ValueError, UnicodeDecodeError, struct.error) as e:
            raise ProtocolError(f"Malformed response from {host}:{port}: {e}") from e

        if response.header.transaction_id != request.header.transaction_id:
            raise ProtocolError(
                f"Transaction ID mismatch: expected {request.header.transaction_id}, "
                f"got {response.header.transaction_id}"
            )

        if not response.header.qr:
            raise ProtocolError(f"Reply from {host}:{port} is not a response")

        logger.debug(
            f"DNS query to {host}:{port} for {query.name} returned "
            f"{len(response.answers)} answers"
        )
        return response


class RetryExecutor(Executor):
    """Re-sends a query when the wrapped executor reports a transport failure"""

    def __init__(self, executor: Executor, retries: int = 2):
        self.executor = executor
        self.retries = retries

    async def query(self, nameserver: str, query: Query) -> DNSMessage:
        attempt = 0
        while True:
            try:
                return await self.executor.query(nameserver, query)
            except TransportError as e:
                if attempt >= self.retries:
                    raise
                attempt += 1
                logger.debug(
                    f"Retrying {query.name} against {nameserver} "
                    f"({attempt}/{self.retries}): {e}"
                )
