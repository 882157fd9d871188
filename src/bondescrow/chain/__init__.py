"""
Contract runtime for bond escrow.

This module provides the pieces every contract is built on:
- Transaction context (sender and logical time captured once)
- Contract base class with snapshot/restore and reentrancy guard
- Capability-based access control
- Hash-chained event log
- Host environment with an atomic transaction executor
"""

from .access import Capability, CapabilitySet
from .accounts import Account
from .context import TransactionContext
from .contract import Contract, ContractState, nonreentrant
from .environment import ChainEnvironment, TransactionReceipt
from .events import ContractEvent, EventLog

__all__ = [
    "Account",
    "Capability",
    "CapabilitySet",
    "ChainEnvironment",
    "Contract",
    "ContractEvent",
    "ContractState",
    "EventLog",
    "TransactionContext",
    "TransactionReceipt",
    "nonreentrant",
]
