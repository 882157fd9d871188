"""Staking of escrowed funds and reward accrual."""

from .reward_ledger import RewardLedger, RewardLedgerState, StakeInfo

__all__ = ["RewardLedger", "RewardLedgerState", "StakeInfo"]
