"""
Transaction context.

The sender and the logical time are captured once when a transaction
starts and threaded through every call the transaction makes, so that all
deadline comparisons within one transaction see the same ``now``.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from ..errors.exceptions import ValidationError

if TYPE_CHECKING:
    from .events import ContractEvent


@dataclass
class TransactionContext:
    """Sender, timestamp and event buffer of one transaction."""

    sender: str
    timestamp: int
    origin: Optional[str] = None
    tx_index: int = 0
    pending_events: List["ContractEvent"] = field(default_factory=list)

    def __post_init__(self):
        if not self.sender:
            raise ValidationError("Transaction sender cannot be empty", field="sender")

        if self.timestamp < 0:
            raise ValidationError(
                "Transaction timestamp must be non-negative",
                field="timestamp",
                value=self.timestamp,
            )

        if self.origin is None:
            self.origin = self.sender

    def call_from(self, caller: str) -> "TransactionContext":
        """Context for a nested call made by ``caller`` within this transaction.

        The nested context shares the timestamp, origin and event buffer.
        """
        return TransactionContext(
            sender=caller,
            timestamp=self.timestamp,
            origin=self.origin,
            tx_index=self.tx_index,
            pending_events=self.pending_events,
        )
