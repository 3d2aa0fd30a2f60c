import logging
from typing import Annotated, List, Optional
import strawberry
from strawberry.scalars import JSON
from strawberry.types import Info
from routefinder.exceptions import RouteError
from routefinder.models import RouteResult as RouteResultModel
from routefinder.validation import is_valid_address, parse_route_params

logger = logging.getLogger(__name__)


@strawberry.type
class RouteStep:
    """GraphQL view of one pool hop"""
    pool_id: Optional[str] = strawberry.field(name="poolId")
    pool_address: Optional[str] = strawberry.field(name="poolAddress")
    input_coin_address: str = strawberry.field(name="inputCoinAddress")
    output_coin_address: str = strawberry.field(name="outputCoinAddress")


@strawberry.type
class RouteResult:
    from_: str = strawberry.field(name="from")
    from_symbol: str
    to: str
    to_symbol: str
    amount: str
    output: str
    route: List[RouteStep]
    route_symbols: JSON
    router_address: str
    calldata: str
    approval_target: Optional[str] = None
    approval_calldata: Optional[str] = None

    @classmethod
    def from_model(cls, result: RouteResultModel) -> "RouteResult":
        return cls(
            from_=result.from_,
            from_symbol=result.from_symbol,
            to=result.to,
            to_symbol=result.to_symbol,
            amount=result.amount,
            output=result.output,
            route=[
                RouteStep(
                    pool_id=step.pool_id,
                    pool_address=step.pool_address,
                    input_coin_address=step.input_coin_address,
                    output_coin_address=step.output_coin_address
                )
                for step in result.route
            ],
            route_symbols=result.route_symbols,
            router_address=result.router_address,
            calldata=result.calldata,
            approval_target=result.approval_target,
            approval_calldata=result.approval_calldata
        )


@strawberry.type
class Query:
    @strawberry.field
    async def route(
            self,
            info: Info,
            from_: Annotated[Optional[str], strawberry.argument(name="from")] = None,
            to: Optional[str] = None,
            amount: Optional[str] = None,
            sender: Optional[str] = None
    ) -> RouteResult:
        query = {"from": from_ or "", "to": to or ""}
        if amount is not None:
            query["amount"] = amount
        parsed = parse_route_params(query)
        if not parsed.success:
            raise ValueError(parsed.error)
        if sender and not is_valid_address(sender):
            raise ValueError(f"Invalid 'sender' address: {sender}")

        enricher = info.context["enricher"]
        params = parsed.data
        try:
            result = await enricher.find_route(params.from_, params.to, params.amount, sender or None)
        except RouteError as e:
            logger.error(f"GraphQL route {params.from_[:10]} -> {params.to[:10]} failed: {str(e)}")
            raise
        return RouteResult.from_model(result)

    @strawberry.field
    async def token_symbol(self, info: Info, address: str) -> str:
        if not is_valid_address(address):
            raise ValueError(f"Invalid address: {address}")
        return await info.context["symbols"].get_token_symbol(address)


# Create the schema
schema = strawberry.Schema(query=Query)
