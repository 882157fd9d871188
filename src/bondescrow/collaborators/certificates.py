"""
In-memory bond certificate registry.

Each posted bond is represented by one non-fungible certificate. Whoever
holds the certificate when the bond expires receives the payout, so
certificates can be traded until they are deactivated at settlement.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..chain.context import TransactionContext
from ..chain.contract import Contract, ContractState
from ..errors.exceptions import (
    AuthorizationError,
    CertificateInactiveError,
    CertificateNotFoundError,
    StateConflictError,
    ValidationError,
)
from .interfaces import CertificateRegistry


@dataclass
class Certificate:
    """A bond certificate."""

    certificate_id: int
    posted_bond_id: int
    owner: str
    issuer: str
    amount: int
    expiry_time: int
    asset_type: str
    uri: str
    minted_at: int
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "certificate_id": self.certificate_id,
            "posted_bond_id": self.posted_bond_id,
            "owner": self.owner,
            "issuer": self.issuer,
            "amount": self.amount,
            "expiry_time": self.expiry_time,
            "asset_type": self.asset_type,
            "uri": self.uri,
            "minted_at": self.minted_at,
            "is_active": self.is_active,
        }


@dataclass
class CertificateRegistryState(ContractState):
    certificates: Dict[int, Certificate] = field(default_factory=dict)
    by_posted_bond: Dict[int, int] = field(default_factory=dict)
    next_certificate_id: int = 0


class BondCertificateRegistry(Contract, CertificateRegistry):
    """Certificate registry whose owner (the escrow) mints and deactivates."""

    contract_type = "certificate_registry"

    def __init__(self, address: str, owner: str):
        super().__init__(address, CertificateRegistryState(owner=owner))

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
        self.require_owner(ctx)
        if not to:
            raise ValidationError("Certificate recipient cannot be empty", field="to")
        if posted_bond_id in self.state.by_posted_bond:
            raise StateConflictError(
                f"Posted bond {posted_bond_id} already has a certificate"
            )

        certificate_id = self.state.next_certificate_id
        self.state.next_certificate_id += 1
        self.state.certificates[certificate_id] = Certificate(
            certificate_id=certificate_id,
            posted_bond_id=posted_bond_id,
            owner=to,
            issuer=issuer,
            amount=amount,
            expiry_time=expiry_time,
            asset_type=asset_type,
            uri=uri,
            minted_at=ctx.timestamp,
        )
        self.state.by_posted_bond[posted_bond_id] = certificate_id

        self.emit(ctx, "CertificateMinted", certificate_id=certificate_id, to=to)
        logger.info(f"Minted certificate {certificate_id} for posted bond {posted_bond_id} to {to}")
        return certificate_id

    def deactivate(self, ctx: TransactionContext, certificate_id: int) -> None:
        self.require_owner(ctx)
        certificate = self.get_certificate(certificate_id)
        if not certificate.is_active:
            raise CertificateInactiveError(certificate_id)

        certificate.is_active = False
        self.emit(ctx, "CertificateDeactivated", certificate_id=certificate_id)

    def transfer(self, ctx: TransactionContext, to: str, certificate_id: int) -> None:
        """Hand a live certificate to another holder."""
        certificate = self.get_certificate(certificate_id)
        if ctx.sender != certificate.owner:
            raise AuthorizationError(
                f"{ctx.sender} does not hold certificate {certificate_id}",
                identity=ctx.sender,
                required="certificate_holder",
            )
        if not to:
            raise ValidationError("Certificate recipient cannot be empty", field="to")
        if not certificate.is_active:
            raise CertificateInactiveError(certificate_id)

        certificate.owner = to
        self.emit(
            ctx,
            "CertificateTransferred",
            certificate_id=certificate_id,
            sender=ctx.sender,
            recipient=to,
        )

    def get_certificate(self, certificate_id: int) -> Certificate:
        certificate = self.state.certificates.get(certificate_id)
        if certificate is None:
            raise CertificateNotFoundError(certificate_id)
        return certificate

    def owner_of(self, certificate_id: int) -> str:
        return self.get_certificate(certificate_id).owner

    def certificate_id_for(self, posted_bond_id: int) -> Optional[int]:
        return self.state.by_posted_bond.get(posted_bond_id)

    def balance_of(self, identity: str) -> int:
        return sum(1 for c in self.state.certificates.values() if c.owner == identity)

    def certificates_of(self, identity: str) -> List[int]:
        return sorted(
            c.certificate_id for c in self.state.certificates.values() if c.owner == identity
        )
