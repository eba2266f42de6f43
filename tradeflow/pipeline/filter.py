"""
Confidence gate for trading opportunities.

Only clearly strong signals are traded: an opportunity is eligible when its
action is not excluded and its confidence is strictly above the threshold.
An opportunity exactly at the threshold is rejected.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from ..config.defaults import FilterParams
from ..logging.config import get_gating_logger, log_gate_decision
from ..models.trading import Opportunity, TradeAction

gating_logger = get_gating_logger(__name__)


@dataclass(frozen=True)
class FilterPolicy:
    """Opportunity gating policy."""
    min_confidence: float = 0.7
    excluded_actions: frozenset[TradeAction] = frozenset({TradeAction.HOLD})

    @classmethod
    def from_params(cls, params: FilterParams) -> "FilterPolicy":
        return cls(
            min_confidence=params.min_confidence,
            excluded_actions=frozenset(TradeAction(a) for a in params.excluded_actions),
        )


def _action_allowed(opportunity: Opportunity, policy: FilterPolicy) -> bool:
    return opportunity.action not in policy.excluded_actions


def _confident(opportunity: Opportunity, policy: FilterPolicy) -> bool:
    # Strict: a confidence equal to the threshold is rejected.
    return opportunity.confidence > policy.min_confidence


def is_eligible(opportunity: Opportunity, policy: FilterPolicy) -> bool:
    """True if the opportunity passes both the action and confidence gates."""
    return _action_allowed(opportunity, policy) and _confident(opportunity, policy)


def filter_opportunities(
    opportunities: Iterable[Opportunity],
    policy: Optional[FilterPolicy] = None
) -> list[Opportunity]:
    """
    Select the opportunities eligible for execution.

    Args:
        opportunities: Candidate opportunities in analysis order
        policy: Gating policy, defaults to FilterPolicy()

    Returns:
        Eligible opportunities, preserving input order
    """
    if policy is None:
        policy = FilterPolicy()

    eligible = []
    for opportunity in opportunities:
        if not _action_allowed(opportunity, policy):
            log_gate_decision(
                gating_logger,
                gate_name="action",
                passed=False,
                pair=opportunity.pair,
                reason=f"action '{opportunity.action.value}' is excluded",
            )
            continue

        passed = _confident(opportunity, policy)
        log_gate_decision(
            gating_logger,
            gate_name="confidence",
            passed=passed,
            pair=opportunity.pair,
            reason=(
                f"confidence {opportunity.confidence} "
                f"{'>' if passed else '<='} {policy.min_confidence}"
            ),
            context={"action": opportunity.action.value},
        )
        if passed:
            eligible.append(opportunity)

    return eligible
