"""Asynchronous DNS stub resolver with CNAME chain following."""

from .core import (
    AliasLoopDetected,
    DNSRecordType,
    RecordNotFound,
    Resolver,
    ResolverError,
    create_resolver,
)

__version__ = "0.1.0"

__all__ = [
    "Resolver",
    "create_resolver",
    "DNSRecordType",
    "ResolverError",
    "RecordNotFound",
    "AliasLoopDetected",
]
