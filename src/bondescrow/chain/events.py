"""
Contract events and the hash-chained event log.

Events emitted during a transaction are buffered on its context and only
appended to the log when the transaction commits.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..crypto.hashing import SHA256Hasher


@dataclass
class ContractEvent:
    """A notification emitted by a contract."""

    name: str
    address: str
    args: Dict[str, Any] = field(default_factory=dict)
    timestamp: int = 0
    tx_index: int = 0
    log_index: int = 0
    origin: Optional[str] = None

    # Chain integrity
    event_hash: Optional[str] = None
    previous_event_hash: Optional[str] = None

    def calculate_hash(self) -> str:
        """Digest over every field except ``event_hash`` itself."""
        payload = self.to_dict()
        del payload["event_hash"]
        return str(SHA256Hasher.hash_json(payload))

    def matches_filter(
        self, name: Optional[str] = None, address: Optional[str] = None
    ) -> bool:
        return (name is None or self.name == name) and (
            address is None or self.address == address
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "address": self.address,
            "args": self.args,
            "timestamp": self.timestamp,
            "tx_index": self.tx_index,
            "log_index": self.log_index,
            "origin": self.origin,
            "event_hash": self.event_hash,
            "previous_event_hash": self.previous_event_hash,
        }


class EventLog:
    """Append-only, hash-chained log of committed contract events."""

    def __init__(self):
        self.events: List[ContractEvent] = []
        self.name_index: Dict[str, List[ContractEvent]] = {}
        self.address_index: Dict[str, List[ContractEvent]] = {}

    def append(self, event: ContractEvent) -> None:
        """Append an event, linking it to the previous one."""
        event.log_index = len(self.events)
        event.previous_event_hash = self.events[-1].event_hash if self.events else None
        event.event_hash = event.calculate_hash()

        self.events.append(event)
        self.name_index.setdefault(event.name, []).append(event)
        self.address_index.setdefault(event.address, []).append(event)

    def extend(self, events: List[ContractEvent]) -> None:
        """Append a batch of events in order."""
        for event in events:
            self.append(event)

    def get_events(
        self, name: Optional[str] = None, address: Optional[str] = None
    ) -> List[ContractEvent]:
        """Committed events by name, emitting address, or both."""
        if name and not address:
            return list(self.name_index.get(name, []))
        if address and not name:
            return list(self.address_index.get(address, []))
        return [event for event in self.events if event.matches_filter(name, address)]

    def latest(self, name: str) -> Optional[ContractEvent]:
        """Most recent event with the given name."""
        events = self.name_index.get(name)
        return events[-1] if events else None

    def verify_integrity(self) -> bool:
        """True if every event hash and back-link is consistent."""
        previous = None
        for event in self.events:
            if event.previous_event_hash != previous or event.event_hash != event.calculate_hash():
                return False
            previous = event.event_hash
        return True

    def get_summary(self) -> Dict[str, Any]:
        """Counts and head hash of the log."""
        return {
            "total_events": len(self.events),
            "event_counts": {name: len(items) for name, items in self.name_index.items()},
            "contracts": len(self.address_index),
            "head": self.events[-1].event_hash if self.events else None,
        }

    def __len__(self) -> int:
        return len(self.events)
