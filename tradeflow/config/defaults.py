"""Default configuration parameters for the autonomous trading pipeline."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FilterParams:
    """Opportunity gating parameters."""
    min_confidence: float = 0.7                      # Strictly greater than required
    excluded_actions: tuple[str, ...] = ("hold",)    # Actions never executed


@dataclass(frozen=True)
class ExecutionParams:
    """Trade execution parameters."""
    default_amount: str = "100"                      # Per-trade amount when no override
    amount_overrides: dict[str, str] = field(default_factory=dict)  # pair -> amount
    max_concurrency: int = 4                         # Concurrent trades per batch
    max_trades_per_cycle: int = 10                   # Eligible trades dispatched per run


@dataclass(frozen=True)
class PlatformParams:
    """Competition platform connection parameters."""
    api_url: str = ""
    api_key: str = ""
    timeout_seconds: float = 30.0
    token_addresses: dict[str, str] = field(default_factory=dict)  # symbol -> address


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""
    filter: FilterParams
    execution: ExecutionParams
    platform: PlatformParams


def get_default_config() -> AppConfig:
    """Get the default configuration instance."""
    return AppConfig(
        filter=FilterParams(),
        execution=ExecutionParams(),
        platform=PlatformParams(),
    )
