"""
Exchange Manager - Central Registry for Earn Adapters

This module provides a centralized manager for all exchange adapters.
The ExchangeManager acts as a registry and owns their lifecycle.

Design Benefits:
    - Single source of truth for which exchanges are aggregated
    - Registry order is the order products are concatenated in
    - Centralized lifecycle management (initialize/shutdown)
    - Adapters can be injected (tests, partial deployments)

Example Usage:
    manager = ExchangeManager()
    await manager.initialize_all()

    aggregator = ProductAggregator(manager.all_exchanges())
    products = await aggregator.aggregate("USDT")

    await manager.shutdown_all()
"""

from typing import Dict, List, Optional, Sequence

from core.config import Settings, settings
from core.exchange_interface import ExchangeInterface
from core.logging import logger


class ExchangeManager:
    """
    Central Manager for Exchange Adapters

    Attributes:
        exchanges: Dictionary mapping exchange names to adapter instances,
                   in registry order
                   Example: {"binance": BinanceExchange(), "bybit": BybitExchange()}

    Example:
        >>> manager = ExchangeManager()
        >>> await manager.initialize_all()
        >>> manager.list_exchanges()
        ['binance', 'bybit', 'okx', 'bitget']
        >>> await manager.shutdown_all()
    """

    def __init__(
        self,
        exchanges: Optional[Sequence[ExchangeInterface]] = None,
        config: Optional[Settings] = None
    ):
        """
        Register the given adapters, or the four default exchanges.

        Args:
            exchanges: Adapters to register instead of the defaults
            config: Settings passed to the default adapters

        Note:
            Adapters are created but not initialized here.
            Call initialize_all() to open their HTTP sessions.
        """
        if exchanges is None:
            exchanges = self._default_exchanges(config or settings)

        self.exchanges: Dict[str, ExchangeInterface] = {}
        for exchange in exchanges:
            if exchange.name in self.exchanges:
                raise ValueError(f"Exchange '{exchange.name}' registered twice")
            self.exchanges[exchange.name] = exchange

        logger.info(f"ExchangeManager initialized with {len(self.exchanges)} exchange(s): {', '.join(self.exchanges.keys())}")

    @staticmethod
    def _default_exchanges(config: Settings) -> List[ExchangeInterface]:
        # Each exchange module imports from core, so we can't import at module level
        from exchanges.binance import BinanceExchange
        from exchanges.bybit import BybitExchange
        from exchanges.okx import OKXExchange
        from exchanges.bitget import BitgetExchange

        return [
            BinanceExchange(config),
            BybitExchange(config),
            OKXExchange(config),
            BitgetExchange(config),
        ]

    # ============================================
    # Exchange Retrieval Methods
    # ============================================

    def list_exchanges(self) -> List[str]:
        """Registered exchange names, in registry order."""
        return list(self.exchanges.keys())

    def all_exchanges(self) -> List[ExchangeInterface]:
        """Registered adapters, in registry order."""
        return list(self.exchanges.values())

    def describe_exchanges(self) -> List[Dict]:
        """
        Summaries for the /exchanges endpoint.

        Example:
            >>> manager.describe_exchanges()[0]
            {'name': 'binance', 'displayName': 'Binance', 'logo': '/logos/binance.svg',
             'credentialsConfigured': False, 'capabilities': {...}}
        """
        return [
            {
                "name": name,
                "displayName": exchange.display_name,
                "logo": exchange.logo,
                "credentialsConfigured": exchange.has_credentials(),
                "capabilities": exchange.capabilities.copy()
            }
            for name, exchange in self.exchanges.items()
        ]

    # ============================================
    # Lifecycle Management
    # ============================================

    async def initialize_all(self) -> None:
        """
        Initialize all registered exchanges.

        A failing exchange is logged and skipped; its adapter keeps producing
        placeholders until the next restart.
        """
        logger.info("Initializing all exchanges...")

        for name, exchange in self.exchanges.items():
            try:
                await exchange.initialize()
                logger.info(f"✓ {exchange.display_name} initialized")
            except Exception as e:
                logger.error(f"✗ Failed to initialize {name}: {e}")

        logger.info("All exchanges initialized")

    async def shutdown_all(self) -> None:
        """Shutdown all exchanges gracefully, continuing past individual failures."""
        logger.info("Shutting down all exchanges...")

        for name, exchange in self.exchanges.items():
            try:
                await exchange.shutdown()
            except Exception as e:
                logger.error(f"✗ Error shutting down {name}: {e}")

        logger.info("All exchanges shut down")

    # ============================================
    # Health Check Methods
    # ============================================

    async def health_check_all(self) -> Dict[str, bool]:
        """
        Check health status of all exchanges.

        Returns:
            Dict[str, bool]: Exchange name -> reachable

        Example:
            >>> await manager.health_check_all()
            {'binance': True, 'bybit': True, 'okx': True, 'bitget': False}
        """
        health_status = {}
        for name, exchange in self.exchanges.items():
            try:
                health_status[name] = await exchange.health_check()
            except Exception as e:
                logger.error(f"Health check failed for {name}: {e}")
                health_status[name] = False

        return health_status

    def __repr__(self) -> str:
        return f"<ExchangeManager(exchanges={list(self.exchanges.keys())})>"

    def __len__(self) -> int:
        return len(self.exchanges)
