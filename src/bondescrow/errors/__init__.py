"""Bond escrow error handling.

This module exposes the exception hierarchy raised by the escrow, staking
and governance contracts and by their collaborators.
"""

from .exceptions import (
    AlreadyExecutedError,
    AlreadySettledError,
    AlreadyVotedError,
    AuthorizationError,
    BondEscrowError,
    BondNotFoundError,
    BondUnavailableError,
    CertificateInactiveError,
    CertificateNotFoundError,
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    ExternalCallError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    NoStakeFoundError,
    NotFoundError,
    NotYetExpiredError,
    PostedBondNotFoundError,
    ProposalNotFoundError,
    ProposalPredatesPostingError,
    ProposalRejectedError,
    QuorumNotReachedError,
    ReentrancyError,
    StateConflictError,
    TransferFailedError,
    ValidationError,
    VotingClosedError,
    VotingStillOpenError,
)

__all__ = [
    # Base
    "BondEscrowError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    # Kinds
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "StateConflictError",
    "AuthorizationError",
    "ExternalCallError",
    # Not found
    "BondNotFoundError",
    "PostedBondNotFoundError",
    "ProposalNotFoundError",
    "NoStakeFoundError",
    "CertificateNotFoundError",
    # State conflicts
    "BondUnavailableError",
    "AlreadySettledError",
    "NotYetExpiredError",
    "AlreadyExecutedError",
    "AlreadyVotedError",
    "VotingClosedError",
    "VotingStillOpenError",
    "QuorumNotReachedError",
    "ProposalRejectedError",
    "ProposalPredatesPostingError",
    "ReentrancyError",
    "CertificateInactiveError",
    # External calls
    "TransferFailedError",
    "InsufficientBalanceError",
    "InsufficientAllowanceError",
]
