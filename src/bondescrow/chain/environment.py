"""
Host execution environment.

Provides the two guarantees the contracts rely on from the ledger they run
on: a logical clock that never goes backwards, and transactions that either
commit completely or leave no trace. Every registered contract is
snapshotted before a transaction runs and restored if it raises; events
emitted during the transaction are published only on commit.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..errors.exceptions import BondEscrowError, ErrorContext
from .context import TransactionContext
from .contract import Contract
from .events import ContractEvent, EventLog

DEFAULT_GENESIS_TIME = 1_700_000_000


@dataclass
class TransactionReceipt:
    """Outcome of one submitted transaction."""

    tx_index: int
    sender: str
    operation: str
    timestamp: int
    success: bool
    result: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    events: List[ContractEvent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert receipt to dictionary."""
        return {
            "tx_index": self.tx_index,
            "sender": self.sender,
            "operation": self.operation,
            "timestamp": self.timestamp,
            "success": self.success,
            "result": self.result,
            "error": self.error,
            "error_code": self.error_code,
            "events": [event.to_dict() for event in self.events],
        }


class ChainEnvironment:
    """Serial, atomic executor for contract calls with a logical clock."""

    def __init__(self, genesis_time: int = DEFAULT_GENESIS_TIME):
        if genesis_time < 0:
            raise ValueError("Genesis time must be non-negative")

        self._now = genesis_time
        self.contracts: Dict[str, Contract] = {}
        self.event_log = EventLog()
        self.receipts: List[TransactionReceipt] = []

    # Clock

    @property
    def now(self) -> int:
        return self._now

    def advance_time(self, seconds: int) -> int:
        """Move the clock forward and return the new time."""
        if seconds < 0:
            raise ValueError("Time cannot move backwards")
        self._now += seconds
        return self._now

    def set_time(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise ValueError(f"Time cannot move backwards ({timestamp} < {self._now})")
        self._now = timestamp

    # Contracts

    def deploy(self, contract: Contract) -> Contract:
        """Register a contract so it takes part in transaction rollback."""
        if contract.address in self.contracts:
            raise ValueError(f"Address {contract.address} already holds a contract")

        self.contracts[contract.address] = contract
        logger.info(f"Deployed {type(contract).__name__} at {contract.address}")
        return contract

    def get_contract(self, address: str) -> Optional[Contract]:
        return self.contracts.get(address)

    # Transactions

    def context(self, sender: str) -> TransactionContext:
        """Fresh context for a transaction sent now."""
        return TransactionContext(
            sender=sender, timestamp=self._now, tx_index=len(self.receipts)
        )

    def transact(self, sender: str, operation: Callable[..., Any], *args, **kwargs) -> Any:
        """Run ``operation(ctx, *args, **kwargs)`` as one atomic transaction.

        On failure every contract is restored to its pre-transaction state,
        buffered events are dropped and the error is re-raised.
        """
        ctx = self.context(sender)
        name = getattr(operation, "__qualname__", repr(operation))
        snapshots = {address: contract.snapshot() for address, contract in self.contracts.items()}

        try:
            result = operation(ctx, *args, **kwargs)
        except Exception as e:
            for address, snapshot in snapshots.items():
                self.contracts[address].restore(snapshot)

            error_code = None
            if isinstance(e, BondEscrowError):
                error_code = e.error_code
                if e.context.operation is None:
                    target = getattr(operation, "__self__", None)
                    e.context = ErrorContext(
                        contract=getattr(target, "address", None),
                        operation=name,
                        sender=sender,
                        timestamp=ctx.timestamp,
                    )

            self.receipts.append(
                TransactionReceipt(
                    tx_index=ctx.tx_index,
                    sender=sender,
                    operation=name,
                    timestamp=ctx.timestamp,
                    success=False,
                    error=str(e),
                    error_code=error_code,
                )
            )
            logger.warning(f"Transaction {ctx.tx_index} ({name}) from {sender} reverted: {e}")
            raise

        self.event_log.extend(ctx.pending_events)
        self.receipts.append(
            TransactionReceipt(
                tx_index=ctx.tx_index,
                sender=sender,
                operation=name,
                timestamp=ctx.timestamp,
                success=True,
                result=result,
                events=list(ctx.pending_events),
            )
        )
        logger.debug(
            f"Transaction {ctx.tx_index} ({name}) committed with {len(ctx.pending_events)} events"
        )
        return result

    @property
    def last_receipt(self) -> Optional[TransactionReceipt]:
        return self.receipts[-1] if self.receipts else None

    def events(self, name: Optional[str] = None, address: Optional[str] = None) -> List[ContractEvent]:
        """Committed events, optionally filtered."""
        return self.event_log.get_events(name=name, address=address)
