"""
External collaborators of the pipeline core.

The core depends only on the capability interfaces in ``base``; the
platform client and prompted analyzer are concrete implementations.
"""

from .base import MarketAnalyzer, TradeExecutor, TradeReceipt

__all__ = ["MarketAnalyzer", "TradeExecutor", "TradeReceipt"]
