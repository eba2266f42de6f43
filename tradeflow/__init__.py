"""
Tradeflow - Autonomous Trading Cycle Pipeline

A typed, sequential pipeline core for autonomous trading on a
trading-competition platform. Chains market analysis, confidence-gated
trade execution and result recording into a single deterministic run.
"""

__version__ = "0.1.0"
__author__ = "Tradeflow Team"
