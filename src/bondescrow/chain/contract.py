"""
Contract base class.

A contract is an addressable object whose entire mutable state lives in a
single ``state`` dataclass. Keeping state in one object lets the host
environment snapshot it before a transaction and restore it if the
transaction fails, so every contract operation is all-or-nothing.
"""

import copy
import functools
import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, TypeVar

from ..errors.exceptions import AuthorizationError, ReentrancyError, ValidationError
from .access import Capability, CapabilitySet
from .context import TransactionContext
from .events import ContractEvent

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class ContractState:
    """State shared by every contract: ownership and capability grants."""

    owner: str
    capabilities: CapabilitySet = field(default_factory=CapabilitySet)
    trusted_caller: Optional[str] = None


def nonreentrant(method: F) -> F:
    """Reject a call into a guarded method while another guarded call on the
    same contract is still in flight."""

    @functools.wraps(method)
    def wrapper(self: "Contract", *args, **kwargs):
        if self._entered:
            raise ReentrancyError(f"{type(self).__name__}.{method.__name__}")
        self._entered = True
        try:
            return method(self, *args, **kwargs)
        finally:
            self._entered = False

    return wrapper  # type: ignore[return-value]


class Contract:
    """Base class for all contracts."""

    contract_type = "standard"

    def __init__(self, address: str, state: ContractState):
        if not address:
            raise ValidationError("Contract address cannot be empty", field="address")

        self.address = address
        self.state = state
        self._entered = False

        self.state.capabilities.grant(state.owner, Capability.ADMIN)

    @property
    def owner(self) -> str:
        return self.state.owner

    @property
    def trusted_caller(self) -> Optional[str]:
        return self.state.trusted_caller

    # Access checks

    def require_owner(self, ctx: TransactionContext) -> None:
        if ctx.sender != self.state.owner:
            raise AuthorizationError(
                f"{ctx.sender} is not the owner of {self.address}",
                identity=ctx.sender,
                required="owner",
            )

    def require_capability(self, ctx: TransactionContext, capability: Capability) -> None:
        self.state.capabilities.require(ctx.sender, capability)

    def require_trusted_caller(self, ctx: TransactionContext) -> None:
        """Only the wired-in trusted caller may pass."""
        if self.state.trusted_caller is None or ctx.sender != self.state.trusted_caller:
            raise AuthorizationError(
                f"{ctx.sender} is not the trusted caller of {self.address}",
                identity=ctx.sender,
                required="trusted_caller",
            )

    def has_capability(self, identity: str, capability: Capability) -> bool:
        return self.state.capabilities.has(identity, capability)

    # Administration

    def transfer_ownership(self, ctx: TransactionContext, new_owner: str) -> None:
        """Hand ownership, and the admin capability that comes with it, to another identity."""
        self.require_owner(ctx)
        if not new_owner:
            raise ValidationError("New owner cannot be empty", field="new_owner")

        previous = self.state.owner
        self.state.capabilities.revoke(previous, Capability.ADMIN)
        self.state.capabilities.grant(new_owner, Capability.ADMIN)
        self.state.owner = new_owner

        self.emit(ctx, "OwnershipTransferred", previous_owner=previous, new_owner=new_owner)

    def set_trusted_caller(self, ctx: TransactionContext, caller: str) -> None:
        """Bind the single identity allowed to call privileged mutators."""
        self.require_capability(ctx, Capability.ADMIN)
        if not caller:
            raise ValidationError("Trusted caller cannot be empty", field="caller")

        previous = self.state.trusted_caller
        self.state.trusted_caller = caller
        self.emit(ctx, "TrustedCallerUpdated", previous=previous, caller=caller)

    def grant_capability(
        self, ctx: TransactionContext, identity: str, capability: Capability
    ) -> bool:
        self.require_capability(ctx, Capability.ADMIN)
        if not identity:
            raise ValidationError("Identity cannot be empty", field="identity")

        granted = self.state.capabilities.grant(identity, capability)
        if granted:
            self.emit(ctx, "CapabilityGranted", identity=identity, capability=capability.value)
        return granted

    def revoke_capability(
        self, ctx: TransactionContext, identity: str, capability: Capability
    ) -> bool:
        self.require_capability(ctx, Capability.ADMIN)
        revoked = self.state.capabilities.revoke(identity, capability)
        if revoked:
            self.emit(ctx, "CapabilityRevoked", identity=identity, capability=capability.value)
        return revoked

    # Events

    def emit(self, ctx: TransactionContext, name: str, **args: Any) -> ContractEvent:
        """Buffer an event on the transaction; it is published on commit."""
        event = ContractEvent(
            name=name,
            address=self.address,
            args=args,
            timestamp=ctx.timestamp,
            tx_index=ctx.tx_index,
            origin=ctx.origin,
        )
        ctx.pending_events.append(event)
        logger.debug(f"{self.address} emitted {name} {args}")
        return event

    # State snapshots

    def snapshot(self) -> ContractState:
        """Deep copy of the current state."""
        return copy.deepcopy(self.state)

    def restore(self, snapshot: ContractState) -> None:
        """Replace the current state with a snapshot taken earlier."""
        self.state = snapshot

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address={self.address!r}, owner={self.owner!r})"
