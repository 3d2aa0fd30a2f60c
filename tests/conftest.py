from collections import Counter
from typing import Dict, List, Optional
import httpx
import pytest
import pytest_asyncio
from routefinder.app import create_app
from routefinder.config import Settings
from routefinder.exceptions import OracleError
from routefinder.models import BestRoute, PopulatedTx, RouteStep

DAI = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
CRVUSD = "0xf939E0A03FB07F59A73314E73794Be0E57ac1b4E"
SENDER = "0x1111111111111111111111111111111111111111"
ROUTER = "0x16C6521Dff6baB339122a0FE25a9116693265353"

TWO_HOP_ROUTE = [
    RouteStep(
        pool_id="factory-crvusd-0",
        pool_address="0x4dece678ceceb27446b35c672dc7d61f30bad69e",
        input_coin_address=DAI.lower(),
        output_coin_address=CRVUSD.lower()
    ),
    RouteStep(
        pool_id="factory-crvusd-1",
        pool_address="0x390f3595bca2df7d23783dfd126427cceb997bf4",
        input_coin_address=CRVUSD.lower(),
        output_coin_address=USDC.lower()
    ),
]


class FakeOracle:
    """Deterministic in-memory routing oracle that counts calls"""

    def __init__(
            self,
            route: Optional[List[RouteStep]] = None,
            output: str = "998.5",
            symbols: Optional[Dict[str, str]] = None,
            swap_tx: Optional[PopulatedTx] = None,
            approved: bool = True,
            approve_txs: Optional[List[PopulatedTx]] = None
    ):
        self.route = TWO_HOP_ROUTE if route is None else route
        self.output = output
        self.symbols = {DAI.lower(): "DAI", USDC.lower(): "USDC", CRVUSD.lower(): "crvUSD"} \
            if symbols is None else symbols
        self.swap_tx = swap_tx or PopulatedTx(to=ROUTER, data="0x371dc447")
        self.approved = approved
        self.approve_txs = [PopulatedTx(to=DAI, data="0x095ea7b3")] if approve_txs is None else approve_txs
        self.fail_route = False
        self.fail_symbols = False
        self.allowance_args = None
        self.calls = Counter()
        self.initialized = False
        self.closed = False

    async def initialize(self) -> None:
        self.initialized = True

    async def best_route_and_output(self, from_address: str, to_address: str, amount: str) -> BestRoute:
        self.calls["best_route_and_output"] += 1
        if self.fail_route:
            raise OracleError("No route found")
        return BestRoute(route=self.route, output=self.output)

    async def symbol_of(self, address: str) -> str:
        self.calls["symbol_of"] += 1
        if self.fail_symbols:
            raise OracleError("execution reverted")
        return self.symbols.get(address.lower(), "")

    async def populate_swap(self, from_address: str, to_address: str, amount: str) -> PopulatedTx:
        self.calls["populate_swap"] += 1
        return self.swap_tx

    async def has_allowance(self, owner: str, tokens: List[str], amounts: List[str], spender: str) -> bool:
        self.calls["has_allowance"] += 1
        self.allowance_args = (owner, tokens, amounts, spender)
        return self.approved

    async def populate_approve(self, token: str, amount: str, sender: str) -> List[PopulatedTx]:
        self.calls["populate_approve"] += 1
        return self.approve_txs

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def oracle() -> FakeOracle:
    return FakeOracle()


@pytest.fixture
def app(oracle):
    return create_app(settings=Settings(), oracle=oracle)


@pytest_asyncio.fixture
async def client(app):
    # ASGITransport does not run the lifespan, so the oracle bootstrap is skipped
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
