"""
Adjudication registry.

Holds leak proposals, collects adjudicator ballots and records verdicts.
Execution is reserved for the escrow, which moves the funds; the registry
itself never pays out a posted bond. The registry's own address also
serves as the governance treasury that receives fees from the escrow.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..chain.access import Capability
from ..chain.context import TransactionContext
from ..chain.contract import Contract, ContractState
from ..collaborators.interfaces import PaymentLedger
from ..config.settings import GovernanceConfig
from ..errors.exceptions import (
    AlreadyExecutedError,
    AlreadyVotedError,
    ProposalNotFoundError,
    QuorumNotReachedError,
    TransferFailedError,
    ValidationError,
    VotingClosedError,
    VotingStillOpenError,
    create_validation_error,
    require_positive,
)
from .core import AdjudicationProposal, Ballot, ProposalStatus


@dataclass
class AdjudicationRegistryState(ContractState):
    voting_period: int = 7 * 86_400
    required_votes: int = 2
    proposals: Dict[int, AdjudicationProposal] = field(default_factory=dict)
    next_proposal_id: int = 0


class AdjudicationRegistry(Contract):
    """Leak adjudication proposals, voting and the governance treasury."""

    contract_type = "adjudication_registry"

    def __init__(
        self,
        address: str,
        owner: str,
        token: PaymentLedger,
        config: Optional[GovernanceConfig] = None,
    ):
        config = config or GovernanceConfig()
        super().__init__(
            address,
            AdjudicationRegistryState(
                owner=owner,
                voting_period=config.voting_period,
                required_votes=config.required_votes,
            ),
        )
        self.token = token

    @property
    def voting_period(self) -> int:
        return self.state.voting_period

    @property
    def required_votes(self) -> int:
        return self.state.required_votes

    # Proposals

    def create_proposal(self, ctx: TransactionContext, posted_bond_id: int, evidence: str) -> int:
        """Open a leak proposal against a posted bond."""
        self.require_capability(ctx, Capability.ADJUDICATOR)
        if not isinstance(posted_bond_id, int) or isinstance(posted_bond_id, bool) or posted_bond_id < 0:
            raise create_validation_error(
                "posted_bond_id", posted_bond_id, "a non-negative integer"
            )

        proposal_id = self.state.next_proposal_id
        proposal = AdjudicationProposal(
            proposal_id=proposal_id,
            posted_bond_id=posted_bond_id,
            proposer=ctx.sender,
            evidence=evidence,
            created_at=ctx.timestamp,
            deadline=ctx.timestamp + self.state.voting_period,
            created_tx=ctx.tx_index,
        )
        self.state.proposals[proposal_id] = proposal
        self.state.next_proposal_id += 1

        self.emit(
            ctx,
            "ProposalCreated",
            proposal_id=proposal_id,
            posted_bond_id=posted_bond_id,
            proposer=ctx.sender,
        )
        logger.info(
            f"Proposal {proposal_id} opened against posted bond {posted_bond_id} "
            f"by {ctx.sender}, voting until {proposal.deadline}"
        )
        return proposal_id

    def vote(self, ctx: TransactionContext, proposal_id: int, support: bool) -> None:
        """Cast the sender's single ballot on a proposal."""
        self.require_capability(ctx, Capability.ADJUDICATOR)
        proposal = self.get_proposal(proposal_id)

        if not proposal.is_voting_open(ctx.timestamp):
            raise VotingClosedError(proposal_id)
        if proposal.has_voted(ctx.sender):
            raise AlreadyVotedError(proposal_id, ctx.sender)

        proposal.record_ballot(
            Ballot(voter=ctx.sender, support=bool(support), timestamp=ctx.timestamp)
        )
        self.emit(ctx, "VoteCast", proposal_id=proposal_id, voter=ctx.sender, support=bool(support))

    def execute_proposal(self, ctx: TransactionContext, proposal_id: int) -> bool:
        """Close a proposal and return its verdict. Escrow only."""
        self.require_trusted_caller(ctx)
        proposal = self.get_proposal(proposal_id)

        if ctx.timestamp <= proposal.deadline:
            raise VotingStillOpenError(proposal_id, proposal.deadline)
        if proposal.executed:
            raise AlreadyExecutedError(proposal_id)
        if proposal.ballot_count < self.state.required_votes:
            raise QuorumNotReachedError(
                proposal_id, proposal.ballot_count, self.state.required_votes
            )

        approved = proposal.verdict()
        proposal.executed = True
        proposal.approved = approved

        self.emit(ctx, "ProposalExecuted", proposal_id=proposal_id, approved=approved)
        logger.info(
            f"Proposal {proposal_id} executed: {'approved' if approved else 'rejected'} "
            f"({proposal.votes_for} for, {proposal.votes_against} against)"
        )
        return approved

    # Administration

    def set_voting_period(self, ctx: TransactionContext, voting_period: int) -> None:
        """Voting window for proposals created from now on."""
        self.require_capability(ctx, Capability.ADMIN)
        require_positive("voting_period", voting_period)
        self.state.voting_period = voting_period
        self.emit(ctx, "VotingPeriodUpdated", voting_period=voting_period)

    def set_required_votes(self, ctx: TransactionContext, required_votes: int) -> None:
        self.require_capability(ctx, Capability.ADMIN)
        require_positive("required_votes", required_votes)
        self.state.required_votes = required_votes
        self.emit(ctx, "RequiredVotesUpdated", required_votes=required_votes)

    def grant_adjudicator(self, ctx: TransactionContext, identity: str) -> bool:
        return self.grant_capability(ctx, identity, Capability.ADJUDICATOR)

    def revoke_adjudicator(self, ctx: TransactionContext, identity: str) -> bool:
        return self.revoke_capability(ctx, identity, Capability.ADJUDICATOR)

    def set_escrow_contract(self, ctx: TransactionContext, escrow: str) -> None:
        """Bind the escrow allowed to execute proposals."""
        self.set_trusted_caller(ctx, escrow)

    def withdraw_treasury(self, ctx: TransactionContext, to: str, amount: int) -> None:
        """Pay collected governance fees out of the treasury."""
        self.require_capability(ctx, Capability.ADMIN)
        if not to:
            raise ValidationError("Recipient cannot be empty", field="to")
        require_positive("amount", amount)

        if not self.token.transfer(ctx.call_from(self.address), to, amount):
            raise TransferFailedError(
                self.address, to, amount, target=getattr(self.token, "address", None)
            )
        self.emit(ctx, "TreasuryWithdrawal", to=to, amount=amount)
        logger.info(f"Treasury paid {amount} to {to}")

    # Reads

    def get_proposal(self, proposal_id: int) -> AdjudicationProposal:
        proposal = self.state.proposals.get(proposal_id)
        if proposal is None:
            raise ProposalNotFoundError(proposal_id)
        return proposal

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return self.get_proposal(proposal_id).has_voted(voter)

    def get_ballot(self, proposal_id: int, voter: str) -> Optional[Ballot]:
        return self.get_proposal(proposal_id).ballots.get(voter)

    def proposal_count(self) -> int:
        return self.state.next_proposal_id

    def proposal_status(self, proposal_id: int, now: int) -> ProposalStatus:
        return self.get_proposal(proposal_id).status(now)

    def adjudicators(self) -> List[str]:
        return self.state.capabilities.holders(Capability.ADJUDICATOR)

    def treasury_balance(self) -> int:
        return self.token.balance_of(self.address)
