"""
Resolver error hierarchy.
"""

from typing import Iterable, Tuple


class ResolverError(Exception):
    """Base class for all errors raised by the resolver package"""


class RecordNotFound(ResolverError):
    """The response did not contain a usable address for the queried name"""


class AliasLoopDetected(ResolverError):
    """A CNAME chain revisited a name or exceeded the configured depth"""

    def __init__(self, chain: Iterable[str], message: str = None):
        self.chain: Tuple[str, ...] = tuple(chain)
        if message is None:
            message = f"CNAME chain does not terminate: {' -> '.join(self.chain)}"
        super().__init__(message)


class TransportError(ResolverError):
    """The query could not be delivered or no reply arrived in time"""


class ProtocolError(ResolverError):
    """A reply arrived but could not be accepted as the answer to the query"""
