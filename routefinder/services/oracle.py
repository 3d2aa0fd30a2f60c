import asyncio
import httpx
import logging
from typing import Any, List, Optional, Protocol
from pydantic import TypeAdapter, ValidationError
from routefinder.config import POOL_FAMILIES
from routefinder.exceptions import OracleError
from routefinder.models import BestRoute, PopulatedTx

logger = logging.getLogger(__name__)

_populated_txs = TypeAdapter(List[PopulatedTx])


class RoutingOracle(Protocol):
    """Pathfinding, pricing and calldata encoding provider"""

    async def initialize(self) -> None: ...

    async def best_route_and_output(self, from_address: str, to_address: str, amount: str) -> BestRoute: ...

    async def symbol_of(self, address: str) -> str: ...

    async def populate_swap(self, from_address: str, to_address: str, amount: str) -> PopulatedTx: ...

    async def has_allowance(self, owner: str, tokens: List[str], amounts: List[str], spender: str) -> bool: ...

    async def populate_approve(self, token: str, amount: str, sender: str) -> List[PopulatedTx]: ...

    async def close(self) -> None: ...


class HttpRoutingOracle:
    """Client for the routing oracle service, which owns the node connection and pool graph"""

    def __init__(
            self,
            base_url: str,
            rpc_url: str,
            chain_id: int,
            timeout: float = 30.0,
            client: Optional[httpx.AsyncClient] = None
    ):
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self.client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={
                "Accept": "application/json",
                "User-Agent": "RouteFinder/1.0"
            }
        )

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise OracleError(
                f"Oracle {method} {url} failed with {e.response.status_code}: {e.response.text}") from e
        except httpx.HTTPError as e:
            raise OracleError(f"Oracle {method} {url} failed: {str(e)}") from e
        except ValueError as e:
            raise OracleError(f"Oracle {method} {url} returned invalid JSON") from e

    async def initialize(self) -> None:
        """Connect the oracle to the node and load every pool family. Blocks until done."""
        logger.info(f"Connecting routing oracle to chain {self.chain_id} at {self.rpc_url}")
        await self._request("POST", "/init", json={"rpc_url": self.rpc_url, "chain_id": self.chain_id})

        logger.info("Fetching pools...")
        # Pool loading can take minutes on a cold node
        await asyncio.gather(*(
            self._request("POST", f"/pools/{family}/fetch", timeout=None)
            for family in POOL_FAMILIES
        ))
        logger.info("Routing oracle initialized")

    async def best_route_and_output(self, from_address: str, to_address: str, amount: str) -> BestRoute:
        data = await self._request(
            "GET",
            "/router/best-route",
            params={"from": from_address, "to": to_address, "amount": amount}
        )
        try:
            return BestRoute.model_validate(data)
        except ValidationError as e:
            raise OracleError(f"Malformed route from oracle: {str(e)}") from e

    async def symbol_of(self, address: str) -> str:
        data = await self._request("GET", "/coins", params={"addresses": address})
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return ""
        return data[0].get("symbol") or ""

    async def populate_swap(self, from_address: str, to_address: str, amount: str) -> PopulatedTx:
        data = await self._request(
            "GET",
            "/router/populate-swap",
            params={"from": from_address, "to": to_address, "amount": amount}
        )
        try:
            return PopulatedTx.model_validate(data)
        except ValidationError as e:
            raise OracleError(f"Malformed swap transaction from oracle: {str(e)}") from e

    async def has_allowance(self, owner: str, tokens: List[str], amounts: List[str], spender: str) -> bool:
        data = await self._request(
            "POST",
            "/allowance",
            json={"owner": owner, "tokens": tokens, "amounts": amounts, "spender": spender}
        )
        if not isinstance(data, dict) or not isinstance(data.get("approved"), bool):
            raise OracleError(f"Malformed allowance response from oracle: {data}")
        return data["approved"]

    async def populate_approve(self, token: str, amount: str, sender: str) -> List[PopulatedTx]:
        data = await self._request(
            "GET",
            "/router/populate-approve",
            params={"token": token, "amount": amount, "sender": sender}
        )
        try:
            return _populated_txs.validate_python(data)
        except ValidationError as e:
            raise OracleError(f"Malformed approve transactions from oracle: {str(e)}") from e

    async def close(self) -> None:
        await self.client.aclose()
