"""
Core adjudication types.

An adjudication proposal accuses one posted bond of a leak. Adjudicators
vote on it during a fixed window; once the window has closed and enough
ballots were cast, the escrow executes it and acts on the verdict.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..errors.exceptions import ValidationError


class ProposalStatus(Enum):
    """Lifecycle status of an adjudication proposal."""

    OPEN = "open"
    CLOSED = "closed"  # voting ended, not yet executed
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Ballot:
    """One adjudicator's vote. Immutable once cast."""

    voter: str
    support: bool
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {"voter": self.voter, "support": self.support, "timestamp": self.timestamp}


@dataclass
class AdjudicationProposal:
    """A leak accusation against a posted bond."""

    proposal_id: int
    posted_bond_id: int
    proposer: str
    evidence: str
    created_at: int
    deadline: int
    created_tx: int = 0
    executed: bool = False
    approved: Optional[bool] = None
    votes_for: int = 0
    votes_against: int = 0
    ballots: Dict[str, Ballot] = field(default_factory=dict)

    def __post_init__(self):
        if not self.evidence:
            raise ValidationError("Evidence cannot be empty", field="evidence")

        if self.deadline < self.created_at:
            raise ValidationError(
                "Deadline cannot precede creation time",
                field="deadline",
                value=self.deadline,
            )

    @property
    def ballot_count(self) -> int:
        return self.votes_for + self.votes_against

    def is_voting_open(self, now: int) -> bool:
        return not self.executed and now <= self.deadline

    def has_voted(self, voter: str) -> bool:
        return voter in self.ballots

    def record_ballot(self, ballot: Ballot) -> None:
        self.ballots[ballot.voter] = ballot
        if ballot.support:
            self.votes_for += 1
        else:
            self.votes_against += 1

    def verdict(self) -> bool:
        """Majority verdict; ties reject."""
        return self.votes_for > self.votes_against

    def status(self, now: int) -> ProposalStatus:
        if self.executed:
            return ProposalStatus.APPROVED if self.approved else ProposalStatus.REJECTED
        if now <= self.deadline:
            return ProposalStatus.OPEN
        return ProposalStatus.CLOSED

    def to_dict(self) -> Dict[str, Any]:
        """Convert proposal to dictionary."""
        return {
            "proposal_id": self.proposal_id,
            "posted_bond_id": self.posted_bond_id,
            "proposer": self.proposer,
            "evidence": self.evidence,
            "created_at": self.created_at,
            "created_tx": self.created_tx,
            "deadline": self.deadline,
            "executed": self.executed,
            "approved": self.approved,
            "votes_for": self.votes_for,
            "votes_against": self.votes_against,
            "ballots": {voter: ballot.to_dict() for voter, ballot in self.ballots.items()},
        }
