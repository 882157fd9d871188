"""
Configuration for the bond escrow contracts.

Each contract family has its own dataclass; ``SystemConfig`` bundles them
for deployment. Values can be overridden with ``BONDESCROW_*`` environment
variables, and every config validates itself on construction.
"""

import logging

logger = logging.getLogger(__name__)
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..errors.exceptions import ConfigurationError

BASIS_POINTS = 10_000
SECONDS_PER_DAY = 86_400
SECONDS_PER_YEAR = 365 * SECONDS_PER_DAY

MAX_GOVERNANCE_FEE_BPS = 1_000  # 10%
MAX_AFFILIATE_FEE_BPS = 500  # 5%
MAX_REWARD_RATE_BPS = BASIS_POINTS


def _apply_environment_overrides(
    config: Any, env_mappings: Dict[str, Tuple[str, type]]
) -> Dict[str, Any]:
    """Apply environment variable overrides to a config object."""
    applied = {}
    for env_var, (attr_name, attr_type) in env_mappings.items():
        env_value = os.getenv(env_var)
        if env_value is None:
            continue
        try:
            if attr_type == bool:
                value = env_value.lower() in ("true", "1", "yes", "on")
            else:
                value = attr_type(env_value)
        except (ValueError, TypeError) as e:
            logger.warning(f"Ignoring invalid environment variable {env_var}={env_value}: {e}")
            continue
        setattr(config, attr_name, value)
        applied[env_var] = value
    if applied:
        logger.info(f"Applied configuration overrides: {sorted(applied)}")
    return applied


def _check_bps(name: str, value: int, cap: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= cap:
        raise ConfigurationError(
            f"{name} must be between 0 and {cap} basis points, got {value}",
            config_key=name,
            config_value=value,
        )


@dataclass
class EscrowConfig:
    """Fee schedule and certificate metadata for the escrow."""

    governance_fee_bps: int = 500  # 5% of staking rewards
    affiliate_fee_bps: int = 200  # 2% of the posted amount
    base_uri: str = ""

    environment_overrides: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Apply environment overrides, then validate."""
        self.environment_overrides = _apply_environment_overrides(
            self,
            {
                "BONDESCROW_GOVERNANCE_FEE_BPS": ("governance_fee_bps", int),
                "BONDESCROW_AFFILIATE_FEE_BPS": ("affiliate_fee_bps", int),
                "BONDESCROW_BASE_URI": ("base_uri", str),
            },
        )
        self.validate()

    def validate(self) -> None:
        _check_bps("governance_fee_bps", self.governance_fee_bps, MAX_GOVERNANCE_FEE_BPS)
        _check_bps("affiliate_fee_bps", self.affiliate_fee_bps, MAX_AFFILIATE_FEE_BPS)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "governance_fee_bps": self.governance_fee_bps,
            "affiliate_fee_bps": self.affiliate_fee_bps,
            "base_uri": self.base_uri,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "EscrowConfig":
        return cls(**config_dict)


@dataclass
class StakingConfig:
    """Reward accrual parameters."""

    reward_rate_bps: int = 1_000  # 10% annual
    seconds_per_year: int = SECONDS_PER_YEAR

    environment_overrides: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.environment_overrides = _apply_environment_overrides(
            self, {"BONDESCROW_REWARD_RATE_BPS": ("reward_rate_bps", int)}
        )
        self.validate()

    def validate(self) -> None:
        _check_bps("reward_rate_bps", self.reward_rate_bps, MAX_REWARD_RATE_BPS)
        if self.seconds_per_year <= 0:
            raise ConfigurationError(
                "seconds_per_year must be positive",
                config_key="seconds_per_year",
                config_value=self.seconds_per_year,
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reward_rate_bps": self.reward_rate_bps,
            "seconds_per_year": self.seconds_per_year,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StakingConfig":
        return cls(**config_dict)


@dataclass
class GovernanceConfig:
    """Adjudication voting parameters."""

    voting_period: int = 7 * SECONDS_PER_DAY
    required_votes: int = 2

    environment_overrides: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.environment_overrides = _apply_environment_overrides(
            self,
            {
                "BONDESCROW_VOTING_PERIOD": ("voting_period", int),
                "BONDESCROW_REQUIRED_VOTES": ("required_votes", int),
            },
        )
        self.validate()

    def validate(self) -> None:
        if self.voting_period <= 0:
            raise ConfigurationError(
                "voting_period must be positive",
                config_key="voting_period",
                config_value=self.voting_period,
            )
        if self.required_votes <= 0:
            raise ConfigurationError(
                "required_votes must be positive",
                config_key="required_votes",
                config_value=self.required_votes,
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "voting_period": self.voting_period,
            "required_votes": self.required_votes,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "GovernanceConfig":
        return cls(**config_dict)


@dataclass
class SystemConfig:
    """Configuration for a full deployment."""

    escrow: EscrowConfig = field(default_factory=EscrowConfig)
    staking: StakingConfig = field(default_factory=StakingConfig)
    governance: GovernanceConfig = field(default_factory=GovernanceConfig)

    # Tokens moved into the staking reserve at deployment
    initial_reward_reserve: int = 0

    def __post_init__(self):
        if self.initial_reward_reserve < 0:
            raise ConfigurationError(
                "initial_reward_reserve cannot be negative",
                config_key="initial_reward_reserve",
                config_value=self.initial_reward_reserve,
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "escrow": self.escrow.to_dict(),
            "staking": self.staking.to_dict(),
            "governance": self.governance.to_dict(),
            "initial_reward_reserve": self.initial_reward_reserve,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "SystemConfig":
        return cls(
            escrow=EscrowConfig.from_dict(config_dict.get("escrow", {})),
            staking=StakingConfig.from_dict(config_dict.get("staking", {})),
            governance=GovernanceConfig.from_dict(config_dict.get("governance", {})),
            initial_reward_reserve=config_dict.get("initial_reward_reserve", 0),
        )


# Global configuration instance
_global_config: Optional[SystemConfig] = None


def get_global_config() -> SystemConfig:
    """Get the global system configuration."""
    global _global_config
    if _global_config is None:
        _global_config = SystemConfig()
    return _global_config


def set_global_config(config: SystemConfig) -> None:
    """Set the global system configuration."""
    global _global_config
    _global_config = config


def reset_global_config() -> None:
    """Reset the global system configuration to defaults."""
    global _global_config
    _global_config = None
