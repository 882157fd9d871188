"""
Reward ledger for escrowed funds.

Every posted bond's principal is staked here under the posted bond's id
and accrues a simple, time-proportional reward at a fixed annual rate.
Only the trusted caller (the escrow) may open or close stakes; rewards
are paid out of the ledger's token reserve together with the principal.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..chain.access import Capability
from ..chain.context import TransactionContext
from ..chain.contract import Contract, ContractState
from ..collaborators.interfaces import PaymentLedger
from ..config.settings import BASIS_POINTS, MAX_REWARD_RATE_BPS, StakingConfig
from ..errors.exceptions import (
    NoStakeFoundError,
    TransferFailedError,
    create_validation_error,
    require_positive,
)


@dataclass
class StakeInfo:
    """An open stake."""

    principal: int
    start_time: int
    last_reward_time: int
    accumulated_rewards: int = 0

    def pending_reward(self, now: int, reward_rate_bps: int, seconds_per_year: int) -> int:
        """Reward accrued since ``last_reward_time``, rounded down."""
        elapsed = max(0, now - self.last_reward_time)
        return (self.principal * reward_rate_bps * elapsed) // (
            BASIS_POINTS * seconds_per_year
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "principal": self.principal,
            "start_time": self.start_time,
            "last_reward_time": self.last_reward_time,
            "accumulated_rewards": self.accumulated_rewards,
        }


@dataclass
class RewardLedgerState(ContractState):
    reward_rate_bps: int = 1_000
    seconds_per_year: int = 365 * 86_400
    stakes: Dict[int, StakeInfo] = field(default_factory=dict)
    total_staked: int = 0


class RewardLedger(Contract):
    """Per-key stakes with linear reward accrual."""

    contract_type = "reward_ledger"

    def __init__(
        self,
        address: str,
        owner: str,
        token: PaymentLedger,
        config: Optional[StakingConfig] = None,
    ):
        config = config or StakingConfig()
        super().__init__(
            address,
            RewardLedgerState(
                owner=owner,
                reward_rate_bps=config.reward_rate_bps,
                seconds_per_year=config.seconds_per_year,
            ),
        )
        self.token = token

    @property
    def reward_rate_bps(self) -> int:
        return self.state.reward_rate_bps

    # Mutators

    def stake(self, ctx: TransactionContext, key: int, amount: int) -> None:
        """Open a stake for ``key`` or add to the existing one."""
        self.require_trusted_caller(ctx)
        require_positive("amount", amount)

        now = ctx.timestamp
        info = self.state.stakes.get(key)
        if info is None:
            self.state.stakes[key] = StakeInfo(
                principal=amount, start_time=now, last_reward_time=now
            )
        else:
            # Settle what accrued on the old principal before it grows
            self._checkpoint(info, now)
            info.principal += amount

        self.state.total_staked += amount
        self.emit(ctx, "Staked", key=key, amount=amount)
        logger.debug(f"Staked {amount} under {key}, total staked {self.state.total_staked}")

    def unstake(self, ctx: TransactionContext, key: int) -> Tuple[int, int]:
        """Close the stake for ``key`` and pay principal plus reward to the caller.

        Returns:
            ``(principal, total_reward)``
        """
        self.require_trusted_caller(ctx)
        info = self.state.stakes.get(key)
        if info is None:
            raise NoStakeFoundError(key)

        principal = info.principal
        total_reward = info.accumulated_rewards + self._pending(info, ctx.timestamp)

        del self.state.stakes[key]
        self.state.total_staked -= principal

        payout = principal + total_reward
        recipient = ctx.sender
        if not self.token.transfer(ctx.call_from(self.address), recipient, payout):
            raise TransferFailedError(
                self.address, recipient, payout, target=getattr(self.token, "address", None)
            )

        self.emit(ctx, "Unstaked", key=key, principal=principal, reward=total_reward)
        logger.debug(
            f"Unstaked {key}: principal {principal}, reward {total_reward} "
            f"after {ctx.timestamp - info.start_time}s"
        )
        return principal, total_reward

    # Administration

    def set_reward_rate(self, ctx: TransactionContext, reward_rate_bps: int) -> None:
        self.require_capability(ctx, Capability.ADMIN)
        if (
            not isinstance(reward_rate_bps, int)
            or isinstance(reward_rate_bps, bool)
            or not 0 <= reward_rate_bps <= MAX_REWARD_RATE_BPS
        ):
            raise create_validation_error(
                "reward_rate_bps", reward_rate_bps, f"0..{MAX_REWARD_RATE_BPS}"
            )

        # Accrual up to now is owed at the old rate
        for info in self.state.stakes.values():
            self._checkpoint(info, ctx.timestamp)
        self.state.reward_rate_bps = reward_rate_bps
        self.emit(ctx, "RewardRateUpdated", reward_rate_bps=reward_rate_bps)

    # Reads

    def calculate_reward(self, key: int, now: int) -> int:
        """Reward pending for ``key`` at ``now``; zero when there is no stake."""
        info = self.state.stakes.get(key)
        if info is None:
            return 0
        return self._pending(info, now)

    def get_stake(self, key: int) -> StakeInfo:
        info = self.state.stakes.get(key)
        if info is None:
            raise NoStakeFoundError(key)
        return info

    def has_stake(self, key: int) -> bool:
        return key in self.state.stakes

    def total_staked(self) -> int:
        return self.state.total_staked

    def _pending(self, info: StakeInfo, now: int) -> int:
        return info.pending_reward(now, self.state.reward_rate_bps, self.state.seconds_per_year)

    def _checkpoint(self, info: StakeInfo, now: int) -> None:
        info.accumulated_rewards += self._pending(info, now)
        info.last_reward_time = max(info.last_reward_time, now)
