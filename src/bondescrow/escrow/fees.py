"""
Basis-point fee arithmetic.

All shares are rounded down; the remainder stays with the party the share
was taken from.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ..config.settings import BASIS_POINTS
from ..errors.exceptions import create_validation_error


def bps_share(amount: int, bps: int) -> int:
    """``amount * bps / 10000`` rounded down."""
    return amount * bps // BASIS_POINTS


def validate_fee_bps(name: str, bps: int, cap: int) -> None:
    if not isinstance(bps, int) or isinstance(bps, bool) or not 0 <= bps <= cap:
        raise create_validation_error(name, bps, f"0..{cap} basis points")


@dataclass(frozen=True)
class SettlementBreakdown:
    """How an expired posted bond's funds are split."""

    principal: int
    reward: int
    governance_fee: int
    holder_payout: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "principal": self.principal,
            "reward": self.reward,
            "governance_fee": self.governance_fee,
            "holder_payout": self.holder_payout,
        }


def split_settlement(principal: int, reward: int, governance_fee_bps: int) -> SettlementBreakdown:
    """Governance takes its cut of the reward only; principal is returned whole."""
    governance_fee = bps_share(reward, governance_fee_bps)
    return SettlementBreakdown(
        principal=principal,
        reward=reward,
        governance_fee=governance_fee,
        holder_payout=principal + reward - governance_fee,
    )
