"""
Escrow coordinator.

Issuers publish bond terms; posters lock the bond amount and receive a
certificate; the locked funds are staked in the reward ledger until the
posted bond is settled. Settlement happens exactly once, either:

- at expiry, paying principal plus reward (minus the governance fee on the
  reward) to whoever holds the certificate, or
- after an approved leak adjudication, paying everything to the issuer.
"""

import logging

logger = logging.getLogger(__name__)
from typing import List, Optional

from ..chain.access import Capability
from ..chain.context import TransactionContext
from ..chain.contract import Contract, nonreentrant
from ..collaborators.interfaces import CertificateRegistry, PaymentLedger
from ..config.settings import MAX_AFFILIATE_FEE_BPS, MAX_GOVERNANCE_FEE_BPS, EscrowConfig
from ..errors.exceptions import (
    AlreadySettledError,
    BondNotFoundError,
    BondUnavailableError,
    NotYetExpiredError,
    PostedBondNotFoundError,
    ProposalPredatesPostingError,
    ProposalRejectedError,
    TransferFailedError,
    require_positive,
)
from ..governance.registry import AdjudicationRegistry
from ..staking.reward_ledger import RewardLedger
from .core import Bond, EscrowState, PostedBond, SettlementOutcome
from .fees import SettlementBreakdown, bps_share, split_settlement, validate_fee_bps


class EscrowCoordinator(Contract):
    """Bond issuance, posting and settlement."""

    contract_type = "bond_escrow"

    def __init__(
        self,
        address: str,
        owner: str,
        token: PaymentLedger,
        certificates: CertificateRegistry,
        ledger: RewardLedger,
        registry: AdjudicationRegistry,
        config: Optional[EscrowConfig] = None,
    ):
        config = config or EscrowConfig()
        super().__init__(
            address,
            EscrowState(
                owner=owner,
                governance_fee_bps=config.governance_fee_bps,
                affiliate_fee_bps=config.affiliate_fee_bps,
                base_uri=config.base_uri,
            ),
        )
        self.token = token
        self.certificates = certificates
        self.ledger = ledger
        self.registry = registry

    @property
    def governance_fee_bps(self) -> int:
        return self.state.governance_fee_bps

    @property
    def affiliate_fee_bps(self) -> int:
        return self.state.affiliate_fee_bps

    @property
    def base_uri(self) -> str:
        return self.state.base_uri

    # Issuance

    def issue_bond(
        self,
        ctx: TransactionContext,
        asset_type: str,
        bond_amount: int,
        duration: int,
        quantity: int,
    ) -> int:
        """Publish bond terms with the sender as issuer."""
        require_positive("bond_amount", bond_amount)
        require_positive("duration", duration)
        require_positive("quantity", quantity)

        bond_id = self.state.next_bond_id
        self.state.next_bond_id += 1
        self.state.bonds[bond_id] = Bond(
            bond_id=bond_id,
            issuer=ctx.sender,
            asset_type=asset_type,
            bond_amount=bond_amount,
            duration=duration,
            quantity=quantity,
            remaining_quantity=quantity,
            created_at=ctx.timestamp,
        )
        self.state.user_bonds.setdefault(ctx.sender, []).append(bond_id)

        self.emit(
            ctx,
            "BondIssued",
            bond_id=bond_id,
            issuer=ctx.sender,
            asset_type=asset_type,
            bond_amount=bond_amount,
            quantity=quantity,
        )
        logger.info(
            f"Bond {bond_id} issued by {ctx.sender}: {quantity} x {bond_amount} "
            f"for {duration}s ({asset_type})"
        )
        return bond_id

    # Posting

    @nonreentrant
    def post_bond(
        self, ctx: TransactionContext, bond_id: int, affiliate: Optional[str] = None
    ) -> int:
        """Lock the bond amount from the sender, mint a certificate and stake the funds."""
        bond = self.get_bond(bond_id)
        if not bond.is_available:
            raise BondUnavailableError(bond_id)

        amount = bond.bond_amount
        escrow_ctx = ctx.call_from(self.address)
        if not self.token.transfer_from(escrow_ctx, ctx.sender, self.address, amount):
            raise TransferFailedError(ctx.sender, self.address, amount, target=self._token_address)

        bond.remaining_quantity -= 1
        if bond.remaining_quantity == 0:
            bond.is_active = False
            self.emit(ctx, "BondExhausted", bond_id=bond_id)

        posted_bond_id = self.state.next_posted_bond_id
        self.state.next_posted_bond_id += 1
        expiry_time = ctx.timestamp + bond.duration

        certificate_id = self.certificates.mint(
            escrow_ctx,
            ctx.sender,
            posted_bond_id,
            bond.issuer,
            amount,
            expiry_time,
            bond.asset_type,
            f"{self.state.base_uri}{posted_bond_id}",
        )
        self.state.posted_bonds[posted_bond_id] = PostedBond(
            posted_bond_id=posted_bond_id,
            bond_id=bond_id,
            poster=ctx.sender,
            amount=amount,
            posted_at=ctx.timestamp,
            expiry_time=expiry_time,
            certificate_id=certificate_id,
            affiliate=affiliate,
            posted_tx=ctx.tx_index,
        )
        self.state.poster_bonds.setdefault(ctx.sender, []).append(posted_bond_id)

        affiliate_fee = 0
        if affiliate and affiliate != ctx.sender:
            affiliate_fee = bps_share(amount, self.state.affiliate_fee_bps)
            if affiliate_fee > 0:
                self._pay(escrow_ctx, affiliate, affiliate_fee)
                self.emit(
                    ctx,
                    "AffiliateRewarded",
                    posted_bond_id=posted_bond_id,
                    affiliate=affiliate,
                    fee=affiliate_fee,
                )

        # The ledger's reserve covers the affiliate fee when the stake is repaid
        self._pay(escrow_ctx, self.ledger.address, amount - affiliate_fee)
        self.ledger.stake(escrow_ctx, posted_bond_id, amount)

        self.emit(
            ctx,
            "BondPosted",
            posted_bond_id=posted_bond_id,
            bond_id=bond_id,
            poster=ctx.sender,
            amount=amount,
        )
        logger.info(
            f"Posted bond {posted_bond_id} on bond {bond_id} by {ctx.sender}, "
            f"{amount} locked until {expiry_time}"
        )
        return posted_bond_id

    # Settlement

    @nonreentrant
    def claim_expired_bond(self, ctx: TransactionContext, posted_bond_id: int) -> int:
        """Settle an expired posted bond in favour of the certificate holder.

        Anyone may trigger the claim. Returns the amount paid to the holder.
        """
        posted = self.get_posted_bond(posted_bond_id)
        if not posted.is_active:
            raise AlreadySettledError(posted_bond_id)
        if not posted.is_expired(ctx.timestamp):
            raise NotYetExpiredError(posted_bond_id, posted.expiry_time, ctx.timestamp)

        self._close(ctx, posted, SettlementOutcome.EXPIRED)

        escrow_ctx = ctx.call_from(self.address)
        holder = self.certificates.owner_of(posted.certificate_id)
        principal, reward = self.ledger.unstake(escrow_ctx, posted_bond_id)
        breakdown = split_settlement(principal, reward, self.state.governance_fee_bps)

        self._pay(escrow_ctx, holder, breakdown.holder_payout)
        if breakdown.governance_fee > 0:
            self._pay(escrow_ctx, self.registry.address, breakdown.governance_fee)
            self.emit(
                ctx,
                "GovernanceFeeCollected",
                posted_bond_id=posted_bond_id,
                fee=breakdown.governance_fee,
            )
        self.certificates.deactivate(escrow_ctx, posted.certificate_id)

        self.emit(
            ctx,
            "BondExpired",
            posted_bond_id=posted_bond_id,
            holder=holder,
            payout=breakdown.holder_payout,
        )
        logger.info(
            f"Posted bond {posted_bond_id} expired: {breakdown.holder_payout} to {holder}, "
            f"governance fee {breakdown.governance_fee}"
        )
        return breakdown.holder_payout

    @nonreentrant
    def adjudicate_leak(self, ctx: TransactionContext, proposal_id: int) -> int:
        """Execute a leak proposal and, if approved, pay the posted bond to its issuer.

        Returns the amount paid to the issuer.
        """
        escrow_ctx = ctx.call_from(self.address)
        if not self.registry.execute_proposal(escrow_ctx, proposal_id):
            raise ProposalRejectedError(proposal_id)

        proposal = self.registry.get_proposal(proposal_id)
        posted = self.get_posted_bond(proposal.posted_bond_id)
        if not posted.is_active:
            raise AlreadySettledError(posted.posted_bond_id)
        # Ballots cast before the posting existed say nothing about it
        if (proposal.created_at, proposal.created_tx) < (posted.posted_at, posted.posted_tx):
            raise ProposalPredatesPostingError(proposal_id, posted.posted_bond_id)

        self._close(ctx, posted, SettlementOutcome.LEAK_ADJUDICATED)

        issuer = self.state.bonds[posted.bond_id].issuer
        principal, reward = self.ledger.unstake(escrow_ctx, posted.posted_bond_id)
        amount = principal + reward
        self._pay(escrow_ctx, issuer, amount)
        self.certificates.deactivate(escrow_ctx, posted.certificate_id)

        self.emit(
            ctx,
            "LeakAdjudicated",
            posted_bond_id=posted.posted_bond_id,
            issuer=issuer,
            amount=amount,
        )
        logger.info(
            f"Leak adjudicated on posted bond {posted.posted_bond_id} "
            f"(proposal {proposal_id}): {amount} to issuer {issuer}"
        )
        return amount

    # Administration

    def set_governance_fee(self, ctx: TransactionContext, bps: int) -> None:
        self.require_capability(ctx, Capability.ADMIN)
        validate_fee_bps("governance_fee_bps", bps, MAX_GOVERNANCE_FEE_BPS)
        self.state.governance_fee_bps = bps
        self.emit(ctx, "FeeUpdated", kind="governance", bps=bps)

    def set_affiliate_fee(self, ctx: TransactionContext, bps: int) -> None:
        self.require_capability(ctx, Capability.ADMIN)
        validate_fee_bps("affiliate_fee_bps", bps, MAX_AFFILIATE_FEE_BPS)
        self.state.affiliate_fee_bps = bps
        self.emit(ctx, "FeeUpdated", kind="affiliate", bps=bps)

    def set_base_uri(self, ctx: TransactionContext, base_uri: str) -> None:
        """Prefix for URIs of certificates minted from now on."""
        self.require_capability(ctx, Capability.ADMIN)
        self.state.base_uri = base_uri
        self.emit(ctx, "BaseUriUpdated", base_uri=base_uri)

    # Reads

    def get_bond(self, bond_id: int) -> Bond:
        bond = self.state.bonds.get(bond_id)
        if bond is None:
            raise BondNotFoundError(bond_id)
        return bond

    def get_posted_bond(self, posted_bond_id: int) -> PostedBond:
        posted = self.state.posted_bonds.get(posted_bond_id)
        if posted is None:
            raise PostedBondNotFoundError(posted_bond_id)
        return posted

    def get_user_bonds(self, issuer: str) -> List[int]:
        """Bond ids issued by ``issuer``, in issuance order."""
        return list(self.state.user_bonds.get(issuer, []))

    def get_poster_bonds(self, poster: str) -> List[int]:
        return list(self.state.poster_bonds.get(poster, []))

    def bond_count(self) -> int:
        return self.state.next_bond_id

    def posted_bond_count(self) -> int:
        return self.state.next_posted_bond_id

    def preview_settlement(self, posted_bond_id: int, now: int) -> SettlementBreakdown:
        """What an expiry claim at ``now`` would pay, without changing anything."""
        posted = self.get_posted_bond(posted_bond_id)
        if not posted.is_active:
            raise AlreadySettledError(posted_bond_id)

        stake = self.ledger.get_stake(posted_bond_id)
        reward = stake.accumulated_rewards + self.ledger.calculate_reward(posted_bond_id, now)
        return split_settlement(stake.principal, reward, self.state.governance_fee_bps)

    # Internals

    @property
    def _token_address(self) -> Optional[str]:
        return getattr(self.token, "address", None)

    def _close(self, ctx: TransactionContext, posted: PostedBond, outcome: SettlementOutcome) -> None:
        # Checkpoint before any outbound call
        posted.is_active = False
        posted.settlement = outcome
        posted.settled_at = ctx.timestamp

    def _pay(self, escrow_ctx: TransactionContext, recipient: str, amount: int) -> None:
        if not self.token.transfer(escrow_ctx, recipient, amount):
            raise TransferFailedError(self.address, recipient, amount, target=self._token_address)
