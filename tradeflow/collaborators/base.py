"""Capability interfaces consumed by the pipeline core."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from ..models.trading import Opportunity

SUCCESS_STATUSES = frozenset({"executed", "success", "completed", "filled"})


@dataclass(frozen=True)
class TradeReceipt:
    """Validated response of a trade execution."""
    amount: str
    status: str

    @property
    def succeeded(self) -> bool:
        return self.status.lower() in SUCCESS_STATUSES


class MarketAnalyzer(ABC):
    """Produces trading opportunities for a set of pairs."""

    @abstractmethod
    async def analyze(self, pairs: Sequence[str]) -> list[Opportunity]:
        """
        Analyze market conditions for the given pairs.

        Raises:
            AnalysisError: If the analysis could not be produced
        """


class TradeExecutor(ABC):
    """Executes a single trading opportunity."""

    @abstractmethod
    async def execute(self, opportunity: Opportunity, amount: str) -> TradeReceipt:
        """
        Execute one opportunity for the given amount.

        Raises:
            ExecutionError: If the trade could not be executed
        """
