"""
DNS Resolver

This module implements the client-side resolution logic:
- Forward lookups that follow CNAME alias chains to A records
- Raw lookups for arbitrary record types
- Reverse (PTR) lookups for IPv4 addresses
"""

import logging
import random
from typing import List, Optional, Sequence, Tuple

from .errors import AliasLoopDetected, RecordNotFound
from .executor import Executor, RetryExecutor, UDPExecutor
from .message import DNSClass, DNSMessage, DNSRecordType, DNSResourceRecord, names_equal
from .query import Query, reverse_pointer_name

logger = logging.getLogger(__name__)

DEFAULT_MAX_ALIAS_DEPTH = 16


class Resolver:
    """Asynchronous stub resolver bound to a single nameserver"""

    def __init__(
        self,
        nameserver: str,
        executor: Executor,
        max_alias_depth: int = DEFAULT_MAX_ALIAS_DEPTH,
        rng: Optional[random.Random] = None,
    ):
        self._nameserver = nameserver
        self._executor = executor
        self.max_alias_depth = max_alias_depth
        self._rng = rng or random.Random()

    @property
    def nameserver(self) -> str:
        return self._nameserver

    @property
    def executor(self) -> Executor:
        return self._executor

    async def resolve(self, domain: str) -> str:
        """Resolve ``domain`` to a single IPv4 address.

        Raises:
            RecordNotFound: If the response holds no address for ``domain``
            AliasLoopDetected: If the CNAME chain does not terminate
        """
        query = Query(domain, DNSRecordType.A, DNSClass.IN)
        response = await self._executor.query(self._nameserver, query)
        return self.extract_address(query, response)

    async def lookup(
        self, domain: str, qtype: DNSRecordType = DNSRecordType.ANY
    ) -> DNSMessage:
        """Look up records of any type and return the response unprocessed"""
        query = Query(domain, qtype, DNSClass.IN)
        return await self._executor.query(self._nameserver, query)

    async def reverse(self, ip: str) -> DNSMessage:
        """Issue a PTR query for an IPv4 address and return the raw response"""
        query = Query(reverse_pointer_name(ip), DNSRecordType.PTR, DNSClass.IN)
        return await self._executor.query(self._nameserver, query)

    def extract_address(self, query: Query, response: DNSMessage) -> str:
        addresses = self.resolve_aliases(response.answers, query.name)

        if not addresses:
            raise RecordNotFound("DNS Request did not return valid answer.")

        address = self._rng.choice(addresses)
        logger.debug(
            f"Picked {address} for {query.name} out of {len(addresses)} addresses"
        )
        return address

    def resolve_aliases(
        self, answers: Sequence[DNSResourceRecord], name: str
    ) -> List[str]:
        """Collect the addresses ``name`` resolves to within ``answers``.

        A records for ``name`` win outright. Otherwise every CNAME for
        ``name`` is followed through the full answer set and the results of
        all branches are concatenated.
        """
        return self._resolve_chain(answers, name, (name,))

    def _resolve_chain(
        self,
        answers: Sequence[DNSResourceRecord],
        name: str,
        chain: Tuple[str, ...],
    ) -> List[str]:
        named = [record for record in answers if names_equal(record.name, name)]
        a_records = [r for r in named if r.rtype == DNSRecordType.A]
        cname_records = [r for r in named if r.rtype == DNSRecordType.CNAME]

        if a_records:
            return [record.data for record in a_records]

        addresses = []
        for record in cname_records:
            target = record.data
            next_chain = chain + (target,)

            if any(names_equal(target, seen) for seen in chain):
                raise AliasLoopDetected(next_chain)
            if len(chain) > self.max_alias_depth:
                raise AliasLoopDetected(
                    next_chain,
                    f"CNAME chain for {chain[0]} exceeds {self.max_alias_depth} hops",
                )

            addresses.extend(self._resolve_chain(answers, target, next_chain))

        return addresses


def create_resolver(config) -> Resolver:
    """Build a resolver with a retrying UDP executor from configuration"""
    executor = RetryExecutor(
        UDPExecutor(port=config.port, timeout=config.timeout),
        retries=config.retries,
    )
    return Resolver(
        config.nameserver, executor, max_alias_depth=config.max_alias_depth
    )
