"""
Core escrow records: bond terms and posted bonds.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..chain.contract import ContractState


class SettlementOutcome(Enum):
    """How a posted bond was closed."""

    EXPIRED = "expired"
    LEAK_ADJUDICATED = "leak_adjudicated"


@dataclass
class Bond:
    """Terms an issuer publishes; each posting consumes one unit of quantity."""

    bond_id: int
    issuer: str
    asset_type: str
    bond_amount: int
    duration: int
    quantity: int
    remaining_quantity: int
    created_at: int
    is_active: bool = True

    @property
    def is_available(self) -> bool:
        return self.is_active and self.remaining_quantity > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bond_id": self.bond_id,
            "issuer": self.issuer,
            "asset_type": self.asset_type,
            "bond_amount": self.bond_amount,
            "duration": self.duration,
            "quantity": self.quantity,
            "remaining_quantity": self.remaining_quantity,
            "created_at": self.created_at,
            "is_active": self.is_active,
        }


@dataclass
class PostedBond:
    """Funds one poster locked against a bond."""

    posted_bond_id: int
    bond_id: int
    poster: str
    amount: int
    posted_at: int
    expiry_time: int
    certificate_id: int
    affiliate: Optional[str] = None
    posted_tx: int = 0
    is_active: bool = True
    settlement: Optional[SettlementOutcome] = None
    settled_at: Optional[int] = None

    def is_expired(self, now: int) -> bool:
        return now >= self.expiry_time

    def to_dict(self) -> Dict[str, Any]:
        return {
            "posted_bond_id": self.posted_bond_id,
            "bond_id": self.bond_id,
            "poster": self.poster,
            "amount": self.amount,
            "posted_at": self.posted_at,
            "expiry_time": self.expiry_time,
            "certificate_id": self.certificate_id,
            "affiliate": self.affiliate,
            "posted_tx": self.posted_tx,
            "is_active": self.is_active,
            "settlement": self.settlement.value if self.settlement else None,
            "settled_at": self.settled_at,
        }


@dataclass
class EscrowState(ContractState):
    governance_fee_bps: int = 500
    affiliate_fee_bps: int = 200
    base_uri: str = ""
    bonds: Dict[int, Bond] = field(default_factory=dict)
    posted_bonds: Dict[int, PostedBond] = field(default_factory=dict)
    # issuer -> bond ids, poster -> posted bond ids
    user_bonds: Dict[str, List[int]] = field(default_factory=dict)
    poster_bonds: Dict[str, List[int]] = field(default_factory=dict)
    next_bond_id: int = 0
    next_posted_bond_id: int = 0
