"""
DNS Resolver Core Module

This module exports the resolver, its executors and the message model.
"""

from .errors import (
    AliasLoopDetected,
    ProtocolError,
    RecordNotFound,
    ResolverError,
    TransportError,
)
from .executor import Executor, RetryExecutor, UDPExecutor
from .message import (
    DNSClass,
    DNSHeader,
    DNSMessage,
    DNSQuestion,
    DNSRecordType,
    DNSResourceRecord,
    create_a_record,
    create_cname_record,
    create_ptr_record,
)
from .query import Query, reverse_pointer_name
from .resolver import Resolver, create_resolver

__all__ = [
    # Resolver
    "Resolver",
    "create_resolver",
    "Query",
    "reverse_pointer_name",
    # Executors
    "Executor",
    "UDPExecutor",
    "RetryExecutor",
    # Errors
    "ResolverError",
    "RecordNotFound",
    "AliasLoopDetected",
    "TransportError",
    "ProtocolError",
    # Message components
    "DNSMessage",
    "DNSHeader",
    "DNSQuestion",
    "DNSResourceRecord",
    "DNSRecordType",
    "DNSClass",
    # Helper functions
    "create_a_record",
    "create_cname_record",
    "create_ptr_record",
]
