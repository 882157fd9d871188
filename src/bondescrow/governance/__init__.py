"""
Leak adjudication governance.

Adjudicators open proposals against posted bonds and vote on them; the
escrow executes closed proposals and redirects funds on approval.
"""

from .core import AdjudicationProposal, Ballot, ProposalStatus
from .registry import AdjudicationRegistry, AdjudicationRegistryState

__all__ = [
    "AdjudicationProposal",
    "AdjudicationRegistry",
    "AdjudicationRegistryState",
    "Ballot",
    "ProposalStatus",
]
