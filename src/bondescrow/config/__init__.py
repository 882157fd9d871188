"""Configuration for bond escrow deployments."""

from .settings import (
    BASIS_POINTS,
    MAX_AFFILIATE_FEE_BPS,
    MAX_GOVERNANCE_FEE_BPS,
    MAX_REWARD_RATE_BPS,
    SECONDS_PER_DAY,
    SECONDS_PER_YEAR,
    EscrowConfig,
    GovernanceConfig,
    StakingConfig,
    SystemConfig,
    get_global_config,
    reset_global_config,
    set_global_config,
)

__all__ = [
    "BASIS_POINTS",
    "MAX_AFFILIATE_FEE_BPS",
    "MAX_GOVERNANCE_FEE_BPS",
    "MAX_REWARD_RATE_BPS",
    "SECONDS_PER_DAY",
    "SECONDS_PER_YEAR",
    "EscrowConfig",
    "GovernanceConfig",
    "StakingConfig",
    "SystemConfig",
    "get_global_config",
    "reset_global_config",
    "set_global_config",
]
