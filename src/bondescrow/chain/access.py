"""
Capability-based access control.

Contracts keep a plain mapping from identity to the set of capabilities it
has been granted and check it explicitly at every gated entry point.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Set

from ..errors.exceptions import AuthorizationError


class Capability(Enum):
    """Capabilities a contract can grant to an identity."""

    ADMIN = "admin"
    ADJUDICATOR = "adjudicator"


@dataclass
class CapabilitySet:
    """Mapping from identity to the capabilities granted to it."""

    grants: Dict[str, Set[Capability]] = field(default_factory=dict)

    def grant(self, identity: str, capability: Capability) -> bool:
        """Grant a capability. Returns False if it was already held."""
        held = self.grants.setdefault(identity, set())
        if capability in held:
            return False
        held.add(capability)
        return True

    def revoke(self, identity: str, capability: Capability) -> bool:
        """Revoke a capability. Returns False if it was not held."""
        held = self.grants.get(identity)
        if not held or capability not in held:
            return False
        held.discard(capability)
        if not held:
            del self.grants[identity]
        return True

    def has(self, identity: str, capability: Capability) -> bool:
        """Check whether an identity holds a capability."""
        return capability in self.grants.get(identity, ())

    def require(self, identity: str, capability: Capability) -> None:
        """Raise AuthorizationError unless the identity holds the capability."""
        if not self.has(identity, capability):
            raise AuthorizationError(
                f"{identity} lacks the {capability.value} capability",
                identity=identity,
                required=capability.value,
            )

    def holders(self, capability: Capability) -> List[str]:
        """List identities holding a capability, sorted for stable output."""
        return sorted(
            identity for identity, held in self.grants.items() if capability in held
        )
