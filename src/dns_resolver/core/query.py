"""
Query value object and request-name helpers.
"""

import ipaddress
import time
from dataclasses import dataclass, field

from .message import DNSClass, DNSQuestion, DNSRecordType

REVERSE_IPV4_SUFFIX = "in-addr.arpa"


@dataclass(frozen=True)
class Query:
    """A single DNS request.

    ``issued_at`` is advisory bookkeeping for callers (cache/TTL accounting);
    the resolver never interprets it.
    """

    name: str
    qtype: DNSRecordType
    qclass: DNSClass = DNSClass.IN
    issued_at: float = field(default_factory=time.time)

    def to_question(self) -> DNSQuestion:
        return DNSQuestion(self.name, int(self.qtype), int(self.qclass))


def reverse_pointer_name(ip: str) -> str:
    """Build the in-addr.arpa name for an IPv4 address.

    Octets are reversed, not characters: ``10.0.0.12`` becomes
    ``12.0.0.10.in-addr.arpa``.

    Raises:
        ValueError: If ``ip`` is not an IPv4 address
    """
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        raise ValueError(f"Invalid IP address: {ip!r}") from None

    if address.version != 4:
        raise ValueError(f"Reverse lookups are only supported for IPv4: {ip}")

    octets = str(address).split(".")
    return ".".join(reversed(octets)) + "." + REVERSE_IPV4_SUFFIX
