"""
In-memory fungible payment token.

Balances and allowances live in the contract state, so token movements are
rolled back together with the escrow state when a transaction fails.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass, field
from typing import Dict

from ..chain.context import TransactionContext
from ..chain.contract import Contract, ContractState
from ..errors.exceptions import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    ValidationError,
    require_positive,
)
from .interfaces import PaymentLedger


@dataclass
class PaymentTokenState(ContractState):
    """Token balances and allowances."""

    name: str = "Payment Token"
    symbol: str = "PAY"
    decimals: int = 18
    total_supply: int = 0
    balances: Dict[str, int] = field(default_factory=dict)
    # owner -> spender -> amount
    allowances: Dict[str, Dict[str, int]] = field(default_factory=dict)


class PaymentToken(Contract, PaymentLedger):
    """Fungible token with owner-controlled minting."""

    contract_type = "payment_token"

    def __init__(
        self,
        address: str,
        owner: str,
        name: str = "Payment Token",
        symbol: str = "PAY",
        decimals: int = 18,
    ):
        super().__init__(
            address,
            PaymentTokenState(owner=owner, name=name, symbol=symbol, decimals=decimals),
        )

    @property
    def name(self) -> str:
        return self.state.name

    @property
    def symbol(self) -> str:
        return self.state.symbol

    @property
    def decimals(self) -> int:
        return self.state.decimals

    def total_supply(self) -> int:
        return self.state.total_supply

    def balance_of(self, identity: str) -> int:
        return self.state.balances.get(identity, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.state.allowances.get(owner, {}).get(spender, 0)

    def mint(self, ctx: TransactionContext, to: str, amount: int) -> None:
        """Create new tokens. Owner only."""
        self.require_owner(ctx)
        if not to:
            raise ValidationError("Recipient cannot be empty", field="to")
        require_positive("amount", amount)

        self.state.balances[to] = self.balance_of(to) + amount
        self.state.total_supply += amount
        self.emit(ctx, "Transfer", sender=None, recipient=to, amount=amount)

    def approve(self, ctx: TransactionContext, spender: str, amount: int) -> bool:
        """Allow ``spender`` to move up to ``amount`` of the sender's tokens."""
        if not spender:
            raise ValidationError("Spender cannot be empty", field="spender")
        if amount < 0:
            raise ValidationError(
                "Allowance cannot be negative", field="amount", value=amount
            )

        self.state.allowances.setdefault(ctx.sender, {})[spender] = amount
        self.emit(ctx, "Approval", owner=ctx.sender, spender=spender, amount=amount)
        return True

    def transfer(self, ctx: TransactionContext, recipient: str, amount: int) -> bool:
        self._move(ctx, ctx.sender, recipient, amount)
        return True

    def transfer_from(
        self, ctx: TransactionContext, owner: str, recipient: str, amount: int
    ) -> bool:
        allowed = self.allowance(owner, ctx.sender)
        if allowed < amount:
            raise InsufficientAllowanceError(
                owner, ctx.sender, allowed, amount, target=self.address
            )

        self._move(ctx, owner, recipient, amount)
        self.state.allowances.setdefault(owner, {})[ctx.sender] = allowed - amount
        return True

    def _move(self, ctx: TransactionContext, sender: str, recipient: str, amount: int) -> None:
        if not recipient:
            raise ValidationError("Recipient cannot be empty", field="recipient")
        if amount < 0:
            raise ValidationError(
                "Transfer amount cannot be negative", field="amount", value=amount
            )

        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalanceError(sender, balance, amount, target=self.address)

        self.state.balances[sender] = balance - amount
        self.state.balances[recipient] = self.balance_of(recipient) + amount
        self.emit(ctx, "Transfer", sender=sender, recipient=recipient, amount=amount)
        logger.debug(f"{self.symbol}: {sender} -> {recipient} {amount}")
