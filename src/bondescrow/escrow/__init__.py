"""
Bond escrow: issuance, posting, and settlement of bonded assets.
"""

from .coordinator import EscrowCoordinator
from .core import Bond, EscrowState, PostedBond, SettlementOutcome
from .fees import SettlementBreakdown, bps_share, split_settlement, validate_fee_bps
from .system import BondEscrowSystem

__all__ = [
    "Bond",
    "BondEscrowSystem",
    "EscrowCoordinator",
    "EscrowState",
    "PostedBond",
    "SettlementBreakdown",
    "SettlementOutcome",
    "bps_share",
    "split_settlement",
    "validate_fee_bps",
]
