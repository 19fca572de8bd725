"""
FastAPI Application - Stablecoin Flexible-Earn APY API

Serves flexible-savings APYs for USDT, USDC and DAI aggregated from
several centralized exchanges.

Supported Exchanges:
    - Binance Simple Earn (requires API key)
    - Bybit Earn
    - OKX Savings
    - Bitget Earn (requires API key and passphrase)

Endpoints:
    - GET /products?coin=USDT&period=1d   Ranked products (cached for CACHE_TTL seconds)
    - GET /exchanges                      Registered exchanges and capabilities
    - GET /health                         Exchange reachability and cache stats
    - GET /                               Service info

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

import asyncio
from contextlib import asynccontextmanager, suppress
from typing import Optional, Sequence

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from core.config import Settings, settings, validate_configuration
from core.exchange_interface import ExchangeInterface
from core.exchange_manager import ExchangeManager
from core.logging import logger
from core.schemas import ApiResponse, Currency, Period
from services.aggregator import ProductAggregator
from services.product_service import ProductService
from storage.cache import ProductCache


# Non-standard status used when the client went away before the response
CLIENT_CLOSED_REQUEST = 499


def create_app(
    exchanges: Optional[Sequence[ExchangeInterface]] = None,
    config: Optional[Settings] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        exchanges: Adapters to aggregate (defaults to every supported exchange)
        config: Settings (defaults to the global settings)

    Application state created in the lifespan:
        app.state.manager, app.state.cache, app.state.aggregator, app.state.product_service
    """
    config = config or settings

    # ============================================
    # Lifespan Management
    # ============================================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handle application startup and shutdown."""
        logger.info("=== Application Starting ===")
        validate_configuration(config)

        manager = ExchangeManager(exchanges, config)
        await manager.initialize_all()

        app.state.manager = manager
        app.state.cache = ProductCache(ttl_seconds=config.cache_ttl)
        app.state.aggregator = ProductAggregator(manager.all_exchanges())
        app.state.product_service = ProductService(app.state.aggregator, app.state.cache)
        logger.info("=== Started Successfully ===")

        yield

        logger.info("=== Shutting Down ===")
        await manager.shutdown_all()
        logger.info("=== Shutdown Complete ===")

    # ============================================
    # FastAPI Application
    # ============================================

    app = FastAPI(
        title="Stablecoin Flexible-Earn APY API",
        description=(
            "Flexible-savings APYs for USDT, USDC and DAI across centralized exchanges.\n\n"
            "**Supported Exchanges:** Binance, Bybit, OKX, Bitget\n\n"
            "Responses use the envelope `{success, data}` or `{success: false, error}`."
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"]
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Invalid query parameters use the failure envelope with HTTP 400."""
        messages = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ())[1:]) or "request"
            messages.append(f"Invalid '{field}': {error.get('msg', 'invalid value')}")

        content = ApiResponse(success=False, error="; ".join(messages) or "Invalid request").to_content()
        return JSONResponse(status_code=400, content=content)

    # ============================================
    # Product Endpoint
    # ============================================

    @app.get("/products", tags=["Products"])
    async def get_products(
        request: Request,
        period: Period = Query(default="1d", description="History window: 1d, 1w or 1m"),
        coin: Currency = Query(default="USDT", description="Stablecoin: USDT, USDC or DAI"),
        include_inactive: bool = Query(default=False, description="Include zero-APY placeholders")
    ):
        """
        Flexible-savings products for a stablecoin, highest APY first.

        The aggregation is cancelled if the client disconnects; a cancelled
        aggregation is never cached.
        """
        service: ProductService = request.app.state.product_service
        task = asyncio.create_task(service.get_products(coin, period, include_inactive))

        try:
            while True:
                done, _ = await asyncio.wait({task}, timeout=config.disconnect_poll_interval)
                if done:
                    break
                if await request.is_disconnected():
                    task.cancel()
                    with suppress(asyncio.CancelledError):
                        await task
                    logger.info(f"Client disconnected, aggregation for {coin}/{period} cancelled")
                    return Response(status_code=CLIENT_CLOSED_REQUEST)

            products = task.result()
        except Exception as e:
            logger.error(f"Failed to fetch {coin} products: {e}", exc_info=True)
            content = ApiResponse(success=False, error="Failed to fetch products").to_content()
            return JSONResponse(status_code=500, content=content)
        finally:
            if not task.done():
                task.cancel()

        return JSONResponse(content=ApiResponse(success=True, data=products).to_content())

    # ============================================
    # System Endpoints
    # ============================================

    @app.get("/", tags=["System"])
    async def root(request: Request):
        """API information and registered exchanges."""
        return {
            "name": "Stablecoin Flexible-Earn APY API",
            "version": "1.0.0",
            "status": "operational",
            "docs": "/docs",
            "exchanges": request.app.state.manager.list_exchanges()
        }

    @app.get("/health", tags=["System"])
    async def health_check(request: Request):
        """Health check - tests connectivity to all exchanges."""
        health = await request.app.state.manager.health_check_all()
        return {
            "status": "healthy" if all(health.values()) else "degraded",
            "exchanges": health,
            "cache": request.app.state.cache.stats()
        }

    @app.get("/exchanges", tags=["System"])
    async def list_exchanges(request: Request):
        """List all registered exchanges and their capabilities."""
        return {"exchanges": request.app.state.manager.describe_exchanges()}

    return app


app = create_app()
