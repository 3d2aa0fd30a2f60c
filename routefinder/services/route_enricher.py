import asyncio
import logging
from typing import Dict, List, Optional, Tuple
from routefinder.exceptions import RouteError
from routefinder.models import BestRoute, PopulatedTx, RouteParams, RouteResult, RouteStep
from routefinder.services.oracle import RoutingOracle
from routefinder.services.response_assembler import assemble_route_result
from routefinder.services.symbol_cache import SymbolCache
from routefinder.validation import is_valid_address

logger = logging.getLogger(__name__)


class RouteEnricher:
    def __init__(self, oracle: RoutingOracle, symbols: SymbolCache):
        self.oracle = oracle
        self.symbols = symbols

    async def find_route(
            self,
            from_address: str,
            to_address: str,
            amount: str,
            sender: Optional[str] = None
    ) -> RouteResult:
        """
        Build an executable swap plan for the given intent.

        The route lookup, the endpoint and hop symbol lookups and the swap
        calldata are fetched concurrently. The allowance check needs the
        swap target, so it runs afterwards and only for a valid sender.

        Args:
            from_address: Address of input token
            to_address: Address of output token
            amount: Input amount as a decimal string
            sender: Optional owner address to check allowance for

        Returns:
            RouteResult with approval fields set only if an approval is needed

        Raises:
            RouteError: the oracle failed to route or to build the swap
        """
        params = RouteParams(from_=from_address, to=to_address, amount=amount)

        # Any oracle failure fails the route, whatever the implementation raises
        try:
            (best, from_symbol, to_symbol, route_symbols), swap_tx = await asyncio.gather(
                self._route_with_symbols(from_address, to_address, amount),
                self.oracle.populate_swap(from_address, to_address, amount)
            )
        except Exception as e:
            raise RouteError(str(e) or type(e).__name__) from e

        if not swap_tx.to or not swap_tx.data:
            raise RouteError("Failed to generate swap transaction")

        approve_tx = None
        if sender and is_valid_address(sender):
            try:
                approve_tx = await self._approval_for(sender, from_address, amount, swap_tx.to)
            except Exception as e:
                raise RouteError(str(e) or type(e).__name__) from e

        return assemble_route_result(
            params,
            from_symbol,
            to_symbol,
            best,
            route_symbols,
            swap_tx,
            approve_tx
        )

    async def _route_with_symbols(
            self,
            from_address: str,
            to_address: str,
            amount: str
    ) -> Tuple[BestRoute, str, str, Dict[str, str]]:
        best, from_symbol, to_symbol = await asyncio.gather(
            self.oracle.best_route_and_output(from_address, to_address, amount),
            self.symbols.get_token_symbol(from_address),
            self.symbols.get_token_symbol(to_address)
        )
        route_symbols = await self._hop_symbols(best.route)
        return best, from_symbol, to_symbol, route_symbols

    async def _hop_symbols(self, route: List[RouteStep]) -> Dict[str, str]:
        """Map every coin address seen along the route to its symbol, skipping unknowns"""
        addresses = list(dict.fromkeys(
            address.lower()
            for step in route
            for address in (step.input_coin_address, step.output_coin_address)
        ))
        symbols = await asyncio.gather(*(self.symbols.get_token_symbol(a) for a in addresses))
        return {address: symbol for address, symbol in zip(addresses, symbols) if symbol}

    async def _approval_for(
            self,
            sender: str,
            token: str,
            amount: str,
            spender: str
    ) -> Optional[PopulatedTx]:
        approved = await self.oracle.has_allowance(sender, [token], [amount], spender)
        if approved:
            return None

        approve_txs = await self.oracle.populate_approve(token, amount, sender)
        approve_tx = approve_txs[0] if approve_txs else None
        if approve_tx is None or not approve_tx.to or not approve_tx.data:
            logger.warning(f"No usable approve transaction for {sender} on {token}")
            return None
        return approve_tx
