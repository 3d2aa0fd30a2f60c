import asyncio
import logging
from typing import Dict
from routefinder.services.oracle import RoutingOracle

logger = logging.getLogger(__name__)


class SymbolCache:
    """
    Process-wide token symbol memo keyed by lowercased address.

    An empty string means the symbol was looked up and is unknown; it is
    never retried. Entries are never evicted, which is fine for the small
    fixed set of tokens a deployment routes through.
    """

    def __init__(self, oracle: RoutingOracle):
        self.oracle = oracle
        self._symbols: Dict[str, str] = {}
        # Lookups in flight, so concurrent misses share one oracle call
        self._pending: Dict[str, asyncio.Future] = {}

    def __len__(self) -> int:
        return len(self._symbols)

    async def get_token_symbol(self, address: str) -> str:
        """Get a token symbol, "" if unknown or the lookup failed"""
        key = address.lower()

        # Check cache first
        if key in self._symbols:
            return self._symbols[key]

        pending = self._pending.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._lookup(address, key))
            self._pending[key] = pending
            pending.add_done_callback(lambda _: self._pending.pop(key, None))

        # One waiter being cancelled must not cancel the shared lookup
        return await asyncio.shield(pending)

    async def _lookup(self, address: str, key: str) -> str:
        try:
            symbol = await self.oracle.symbol_of(address) or ""
        except Exception as e:
            # A missing symbol must never block routing
            logger.warning(f"Symbol lookup failed for {address}: {str(e)}")
            symbol = ""

        self._symbols[key] = symbol
        return symbol
