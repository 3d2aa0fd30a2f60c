import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from strawberry.fastapi import GraphQLRouter
from routefinder.api import router as api_router
from routefinder.config import Settings, settings as default_settings
from routefinder.schema import schema
from routefinder.services.oracle import HttpRoutingOracle, RoutingOracle
from routefinder.services.route_enricher import RouteEnricher
from routefinder.services.symbol_cache import SymbolCache

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

HTTP_ERRORS = {
    404: "Not found",
    405: "Method not allowed",
}


# starlette's CORSMiddleware answers only real preflights, and with 200 rather than 204
class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Answers OPTIONS on any path with 204 and tags every response with CORS headers"""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = HTTP_ERRORS.get(exc.status_code, str(exc.detail))
    if exc.status_code in HTTP_ERRORS:
        logger.debug(f"{request.method} {request.url.path}: {message}")
    return JSONResponse({"error": message}, status_code=exc.status_code, headers=exc.headers)


async def get_context(request: Request) -> Dict[str, Any]:
    return {
        "enricher": request.app.state.enricher,
        "symbols": request.app.state.symbols
    }


def create_app(settings: Settings = default_settings, oracle: Optional[RoutingOracle] = None) -> FastAPI:
    if oracle is None:
        oracle = HttpRoutingOracle(
            base_url=settings.ORACLE_URL,
            rpc_url=settings.RPC_URL,
            chain_id=settings.CHAIN_ID,
            timeout=settings.ORACLE_TIMEOUT
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            # Pools must be loaded before the first request is accepted
            await oracle.initialize()
        except Exception as e:
            logger.error(f"Failed to start server: {str(e)}", exc_info=True)
            await oracle.close()
            raise
        logger.info(f"Server listening on http://{settings.HOST}:{settings.PORT}")
        try:
            yield
        finally:
            await oracle.close()
            logger.info("Routing oracle client closed")

    app = FastAPI(title="Route Finder", lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)

    symbols = SymbolCache(oracle)
    app.state.oracle = oracle
    app.state.symbols = symbols
    app.state.enricher = RouteEnricher(oracle, symbols)

    app.add_middleware(CORSHeadersMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.include_router(api_router)

    graphql_app = GraphQLRouter(
        schema,
        context_getter=get_context,
    )
    app.include_router(graphql_app, prefix="/graphql")

    return app
