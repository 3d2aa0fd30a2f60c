from typing import Dict, Optional
from routefinder.exceptions import RouteError
from routefinder.models import BestRoute, PopulatedTx, RouteParams, RouteResult


def assemble_route_result(
        params: RouteParams,
        from_symbol: str,
        to_symbol: str,
        best: Optional[BestRoute],
        route_symbols: Dict[str, str],
        swap_tx: Optional[PopulatedTx],
        approve_tx: Optional[PopulatedTx] = None
) -> RouteResult:
    """
    Merge the enrichment outputs into one RouteResult.

    Raises:
        RouteError: the route or an executable swap transaction is missing
    """
    if best is None:
        raise RouteError("Failed to find a route")
    if swap_tx is None or not swap_tx.to or not swap_tx.data:
        raise RouteError("Failed to generate swap transaction")

    result = RouteResult(
        from_=params.from_,
        from_symbol=from_symbol,
        to=params.to,
        to_symbol=to_symbol,
        amount=params.amount,
        output=best.output,
        route=best.route,
        route_symbols=route_symbols,
        router_address=swap_tx.to,
        calldata=swap_tx.data
    )

    # Approval fields travel together or not at all
    if approve_tx is not None and approve_tx.to and approve_tx.data:
        result.approval_target = approve_tx.to
        result.approval_calldata = approve_tx.data

    return result
