import pytest
from conftest import DAI, SENDER, USDC, FakeOracle
from routefinder.schema import schema
from routefinder.services.route_enricher import RouteEnricher
from routefinder.services.symbol_cache import SymbolCache

ROUTE_QUERY = """
query Route($from: String, $to: String, $amount: String, $sender: String) {
    route(from: $from, to: $to, amount: $amount, sender: $sender) {
        from
        fromSymbol
        toSymbol
        amount
        output
        route { poolId inputCoinAddress outputCoinAddress }
        routeSymbols
        routerAddress
        calldata
        approvalTarget
        approvalCalldata
    }
}
"""


def make_context(oracle: FakeOracle):
    symbols = SymbolCache(oracle)
    return {"enricher": RouteEnricher(oracle, symbols), "symbols": symbols}


@pytest.mark.asyncio
async def test_route_query():
    oracle = FakeOracle(approved=False)
    result = await schema.execute(
        ROUTE_QUERY,
        variable_values={"from": DAI, "to": USDC, "amount": "1000", "sender": SENDER},
        context_value=make_context(oracle),
    )

    assert result.errors is None
    route = result.data["route"]
    assert route["from"] == DAI
    assert route["fromSymbol"] == "DAI"
    assert route["output"] == "998.5"
    assert len(route["route"]) == 2
    assert route["routeSymbols"][USDC.lower()] == "USDC"
    assert route["approvalTarget"] == DAI
    assert route["approvalCalldata"] == "0x095ea7b3"


@pytest.mark.asyncio
async def test_route_query_defaults_amount():
    result = await schema.execute(
        ROUTE_QUERY,
        variable_values={"from": DAI, "to": USDC},
        context_value=make_context(FakeOracle()),
    )

    assert result.errors is None
    assert result.data["route"]["amount"] == "1"
    assert result.data["route"]["approvalTarget"] is None


@pytest.mark.asyncio
async def test_route_query_validation_error():
    result = await schema.execute(
        ROUTE_QUERY,
        variable_values={"to": USDC},
        context_value=make_context(FakeOracle()),
    )

    assert result.errors
    assert "Missing required params" in result.errors[0].message


@pytest.mark.asyncio
async def test_route_query_route_error():
    oracle = FakeOracle()
    oracle.fail_route = True
    result = await schema.execute(
        ROUTE_QUERY,
        variable_values={"from": DAI, "to": USDC},
        context_value=make_context(oracle),
    )

    assert result.errors
    assert result.errors[0].message == "No route found"


@pytest.mark.asyncio
async def test_token_symbol_query():
    oracle = FakeOracle()
    context = make_context(oracle)
    query = "query Symbol($address: String!) { tokenSymbol(address: $address) }"

    result = await schema.execute(query, variable_values={"address": DAI}, context_value=context)
    assert result.data == {"tokenSymbol": "DAI"}

    result = await schema.execute(query, variable_values={"address": "DAI"}, context_value=context)
    assert result.errors
    assert "Invalid address" in result.errors[0].message
