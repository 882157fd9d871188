"""Exception hierarchy for the bond escrow contracts.

Every failure raised by a contract aborts the enclosing transaction. The
classes below mirror the five failure kinds the contracts distinguish
(validation, not-found, state conflict, authorization and external call
failure) and carry structured context for logging and client reporting.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STATE_CONFLICT = "state_conflict"
    AUTHORIZATION = "authorization"
    EXTERNAL_CALL = "external_call"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Where a failed transaction was headed; filled in when it reverts."""

    contract: Optional[str] = None
    operation: Optional[str] = None
    sender: Optional[str] = None
    timestamp: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class BondEscrowError(Exception):
    """Base exception for all bond escrow errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        retryable: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.context = context or ErrorContext()
        self.cause = cause
        self.retryable = retryable
        self.metadata = metadata or {}

    def details(self) -> Dict[str, Any]:
        """Kind-specific fields merged into ``to_dict``."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        data = {
            "type": type(self).__name__,
            "message": self.message,
            "error_code": self.error_code,
            "severity": self.severity.value,
            "category": self.category.value,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
            "retryable": self.retryable,
            "metadata": self.metadata,
        }
        data.update(self.details())
        return data

    def __str__(self) -> str:
        text = f"{type(self).__name__}: {self.message}"
        if self.error_code:
            text += f" | Code: {self.error_code}"
        if self.severity != ErrorSeverity.MEDIUM:
            text += f" | Severity: {self.severity.value}"
        if self.retryable:
            text += " | Retryable: Yes"
        return text


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


class ValidationError(BondEscrowError):
    """Invalid argument: non-positive amount, fee above cap, empty field."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[Any] = None,
        **kwargs,
    ):
        kwargs.setdefault("error_code", "VALIDATION")
        super().__init__(message, category=ErrorCategory.VALIDATION, **kwargs)
        self.field = field
        self.value = value
        self.expected = expected

    def details(self) -> Dict[str, Any]:
        return {"field": self.field, "value": _text(self.value), "expected": _text(self.expected)}


class ConfigurationError(BondEscrowError):
    """Configuration value out of range or malformed."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs,
    ):
        kwargs.setdefault("error_code", "CONFIGURATION")
        super().__init__(message, category=ErrorCategory.CONFIGURATION, **kwargs)
        self.config_key = config_key
        self.config_value = config_value

    def details(self) -> Dict[str, Any]:
        return {"config_key": self.config_key, "config_value": _text(self.config_value)}


class NotFoundError(BondEscrowError):
    """Unknown bond, posted bond, proposal or stake."""

    resource_type = "resource"

    def __init__(self, resource_id: Any, message: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", "NOT_FOUND")
        super().__init__(
            message or f"{self.resource_type} {resource_id} not found",
            category=ErrorCategory.NOT_FOUND,
            **kwargs,
        )
        self.resource_id = resource_id

    def details(self) -> Dict[str, Any]:
        return {"resource_type": self.resource_type, "resource_id": self.resource_id}


class BondNotFoundError(NotFoundError):
    resource_type = "Bond"


class PostedBondNotFoundError(NotFoundError):
    resource_type = "Posted bond"


class ProposalNotFoundError(NotFoundError):
    resource_type = "Proposal"


class NoStakeFoundError(NotFoundError):
    resource_type = "Stake"


class CertificateNotFoundError(NotFoundError):
    resource_type = "Certificate"


class StateConflictError(BondEscrowError):
    """Operation not allowed in the current state of a record."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "STATE_CONFLICT")
        super().__init__(message, category=ErrorCategory.STATE_CONFLICT, **kwargs)


class BondUnavailableError(StateConflictError):
    """Bond is inactive or has no remaining quantity."""

    def __init__(self, bond_id: int, **kwargs):
        kwargs.setdefault("error_code", "BOND_UNAVAILABLE")
        super().__init__(f"Bond {bond_id} is not available for posting", **kwargs)
        self.bond_id = bond_id


class AlreadySettledError(StateConflictError):
    """Posted bond was already claimed or adjudicated."""

    def __init__(self, posted_bond_id: int, **kwargs):
        kwargs.setdefault("error_code", "ALREADY_SETTLED")
        super().__init__(f"Posted bond {posted_bond_id} is already settled", **kwargs)
        self.posted_bond_id = posted_bond_id


class NotYetExpiredError(StateConflictError):
    """Posted bond cannot be claimed before its expiry time."""

    def __init__(self, posted_bond_id: int, expiry_time: int, now: int, **kwargs):
        kwargs.setdefault("error_code", "NOT_YET_EXPIRED")
        super().__init__(
            f"Posted bond {posted_bond_id} expires at {expiry_time} (now {now})",
            **kwargs,
        )
        self.posted_bond_id = posted_bond_id
        self.expiry_time = expiry_time
        self.now = now


class AlreadyExecutedError(StateConflictError):
    def __init__(self, proposal_id: int, **kwargs):
        kwargs.setdefault("error_code", "ALREADY_EXECUTED")
        super().__init__(f"Proposal {proposal_id} already executed", **kwargs)
        self.proposal_id = proposal_id


class AlreadyVotedError(StateConflictError):
    def __init__(self, proposal_id: int, voter: str, **kwargs):
        kwargs.setdefault("error_code", "ALREADY_VOTED")
        super().__init__(f"{voter} already voted on proposal {proposal_id}", **kwargs)
        self.proposal_id = proposal_id
        self.voter = voter


class VotingClosedError(StateConflictError):
    def __init__(self, proposal_id: int, **kwargs):
        kwargs.setdefault("error_code", "VOTING_CLOSED")
        super().__init__(f"Voting on proposal {proposal_id} is closed", **kwargs)
        self.proposal_id = proposal_id


class VotingStillOpenError(StateConflictError):
    def __init__(self, proposal_id: int, deadline: int, **kwargs):
        kwargs.setdefault("error_code", "VOTING_STILL_OPEN")
        super().__init__(
            f"Voting on proposal {proposal_id} is open until {deadline}", **kwargs
        )
        self.proposal_id = proposal_id
        self.deadline = deadline


class QuorumNotReachedError(StateConflictError):
    def __init__(self, proposal_id: int, ballots: int, required: int, **kwargs):
        kwargs.setdefault("error_code", "QUORUM_NOT_REACHED")
        super().__init__(
            f"Proposal {proposal_id} has {ballots} ballots, {required} required",
            **kwargs,
        )
        self.proposal_id = proposal_id
        self.ballots = ballots
        self.required = required


class ProposalRejectedError(StateConflictError):
    def __init__(self, proposal_id: int, **kwargs):
        kwargs.setdefault("error_code", "PROPOSAL_REJECTED")
        super().__init__(f"Proposal {proposal_id} was not approved", **kwargs)
        self.proposal_id = proposal_id


class ProposalPredatesPostingError(StateConflictError):
    """Proposal was opened before the posted bond it names existed."""

    def __init__(self, proposal_id: int, posted_bond_id: int, **kwargs):
        kwargs.setdefault("error_code", "PROPOSAL_PREDATES_POSTING")
        super().__init__(
            f"Proposal {proposal_id} was opened before posted bond {posted_bond_id}",
            **kwargs,
        )
        self.proposal_id = proposal_id
        self.posted_bond_id = posted_bond_id


class ReentrancyError(StateConflictError):
    def __init__(self, operation: str, **kwargs):
        kwargs.setdefault("error_code", "REENTRANT_CALL")
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(f"Reentrant call to {operation}", **kwargs)
        self.operation = operation


class CertificateInactiveError(StateConflictError):
    def __init__(self, certificate_id: int, **kwargs):
        kwargs.setdefault("error_code", "CERTIFICATE_INACTIVE")
        super().__init__(f"Certificate {certificate_id} is deactivated", **kwargs)
        self.certificate_id = certificate_id


class AuthorizationError(BondEscrowError):
    """Caller lacks the required capability or identity match."""

    def __init__(
        self,
        message: str,
        identity: Optional[str] = None,
        required: Optional[str] = None,
        **kwargs,
    ):
        kwargs.setdefault("error_code", "UNAUTHORIZED")
        super().__init__(
            message,
            category=ErrorCategory.AUTHORIZATION,
            severity=ErrorSeverity.HIGH,
            **kwargs,
        )
        self.identity = identity
        self.required = required

    def details(self) -> Dict[str, Any]:
        return {"identity": self.identity, "required": self.required}


class ExternalCallError(BondEscrowError):
    """A collaborator call (token transfer, certificate mint) failed."""

    def __init__(self, message: str, target: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", "EXTERNAL_CALL_FAILED")
        super().__init__(
            message, category=ErrorCategory.EXTERNAL_CALL, retryable=True, **kwargs
        )
        self.target = target

    def details(self) -> Dict[str, Any]:
        return {"target": self.target}


class TransferFailedError(ExternalCallError):
    def __init__(self, sender: str, recipient: str, amount: int, **kwargs):
        kwargs.setdefault("error_code", "TRANSFER_FAILED")
        super().__init__(
            f"Transfer of {amount} from {sender} to {recipient} failed", **kwargs
        )
        self.sender = sender
        self.recipient = recipient
        self.amount = amount


class InsufficientBalanceError(ExternalCallError):
    def __init__(self, account: str, balance: int, needed: int, **kwargs):
        kwargs.setdefault("error_code", "INSUFFICIENT_BALANCE")
        super().__init__(
            f"{account} holds {balance}, needs {needed}", **kwargs
        )
        self.account = account
        self.balance = balance
        self.needed = needed


class InsufficientAllowanceError(ExternalCallError):
    def __init__(self, owner: str, spender: str, allowance: int, needed: int, **kwargs):
        kwargs.setdefault("error_code", "INSUFFICIENT_ALLOWANCE")
        super().__init__(
            f"{spender} may spend {allowance} of {owner}'s funds, needs {needed}",
            **kwargs,
        )
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.needed = needed


def create_validation_error(
    field: str, value: Any, expected: Any, message: Optional[str] = None
) -> ValidationError:
    """Validation error with the standard message."""
    return ValidationError(
        message or f"Invalid value for field '{field}': expected {expected}, got {value}",
        field=field,
        value=value,
        expected=expected,
    )


def require_positive(field: str, value: int) -> None:
    """Raise a validation error unless value is a positive integer."""
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise create_validation_error(field, value, "a positive integer")
