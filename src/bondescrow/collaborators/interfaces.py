"""
Interfaces of the external contracts the escrow depends on.

The escrow only needs a fungible payment ledger to move funds and a
certificate registry to record who is entitled to a posted bond's payout.
Any implementation honoring these methods can be wired in.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..chain.context import TransactionContext


class PaymentLedger(ABC):
    """Fungible token ledger."""

    @abstractmethod
    def transfer_from(
        self, ctx: TransactionContext, owner: str, recipient: str, amount: int
    ) -> bool:
        """Move ``amount`` from ``owner`` to ``recipient`` on behalf of ``ctx.sender``."""

    @abstractmethod
    def transfer(self, ctx: TransactionContext, recipient: str, amount: int) -> bool:
        """Move ``amount`` from ``ctx.sender`` to ``recipient``."""

    @abstractmethod
    def balance_of(self, identity: str) -> int:
        """Current balance of an identity."""


class CertificateRegistry(ABC):
    """Non-fungible certificates representing posted bond payouts."""

    @abstractmethod
    def mint(
        self,
        ctx: TransactionContext,
        to: str,
        posted_bond_id: int,
        issuer: str,
        amount: int,
        expiry_time: int,
        asset_type: str,
        uri: str,
    ) -> int:
        """Mint a certificate for a posted bond and return its id."""

    @abstractmethod
    def deactivate(self, ctx: TransactionContext, certificate_id: int) -> None:
        """Mark a certificate as settled."""

    @abstractmethod
    def owner_of(self, certificate_id: int) -> str:
        """Current holder of a certificate."""

    @abstractmethod
    def certificate_id_for(self, posted_bond_id: int) -> Optional[int]:
        """Certificate minted for a posted bond, if any."""
