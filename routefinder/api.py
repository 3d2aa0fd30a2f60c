import logging
import time
from pathlib import Path
from typing import Dict
from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse
from routefinder.exceptions import RouteError
from routefinder.services.route_enricher import RouteEnricher
from routefinder.models import ParseResult
from routefinder.validation import DEFAULT_AMOUNT, is_valid_address, parse_route_params

logger = logging.getLogger(__name__)

INDEX_HTML = (Path(__file__).parent / "static" / "index.html").read_text(encoding="utf-8")

router = APIRouter()


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _label(symbol: str, address: str) -> str:
    """Symbol when known, otherwise an address prefix"""
    return symbol or address[:10]


def _elapsed_ms(started: float) -> int:
    return round((time.perf_counter() - started) * 1000)


@router.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    return HTMLResponse(INDEX_HTML)


def first_values(request: Request) -> Dict[str, str]:
    """Query params keeping the first value of a repeated key"""
    query: Dict[str, str] = {}
    for key, value in request.query_params.multi_items():
        query.setdefault(key, value)
    return query


@router.get("/route")
async def route(request: Request) -> JSONResponse:
    started = time.perf_counter()
    query = first_values(request)

    parsed = parse_route_params(query)
    # An empty sender is the same as no sender
    sender = query.get("sender") or None
    if parsed.success and sender is not None and not is_valid_address(sender):
        parsed = ParseResult.fail(f"Invalid 'sender' address: {sender}")

    if not parsed.success:
        logger.info(
            f"Rejected route request amount={query.get('amount', DEFAULT_AMOUNT)} "
            f"in {_elapsed_ms(started)}ms: {parsed.error}"
        )
        return error_response(400, parsed.error)

    params = parsed.data
    enricher: RouteEnricher = request.app.state.enricher
    try:
        result = await enricher.find_route(params.from_, params.to, params.amount, sender)
    except RouteError as e:
        logger.error(
            f"Route {params.from_[:10]} -> {params.to[:10]} amount={params.amount} "
            f"failed in {_elapsed_ms(started)}ms: {str(e)}"
        )
        return error_response(500, str(e))

    logger.info(
        f"Route {_label(result.from_symbol, result.from_)} -> {_label(result.to_symbol, result.to)} "
        f"amount={result.amount} output={result.output} steps={len(result.route)} "
        f"approval={'yes' if result.approval_target else 'no'} in {_elapsed_ms(started)}ms"
    )
    return JSONResponse(result.to_json())
