"""
Deployment and wiring of a complete bond escrow system.

Deploys the payment token, certificate registry, reward ledger,
adjudication registry and escrow into one environment, then hands the
escrow the rights it needs: ownership of the certificate registry and
trusted-caller status on the ledger and the registry. The ledger's reward
reserve is funded from the configuration.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..chain.accounts import Account
from ..chain.environment import ChainEnvironment
from ..collaborators.certificates import BondCertificateRegistry
from ..collaborators.token import PaymentToken
from ..config.settings import SystemConfig, get_global_config
from ..governance.registry import AdjudicationRegistry
from ..staking.reward_ledger import RewardLedger
from .coordinator import EscrowCoordinator


def _address(label: str) -> str:
    return Account.from_seed(label).address


@dataclass
class BondEscrowSystem:
    """The five wired contracts and the environment they run in."""

    env: ChainEnvironment
    deployer: str
    token: PaymentToken
    certificates: BondCertificateRegistry
    ledger: RewardLedger
    registry: AdjudicationRegistry
    escrow: EscrowCoordinator
    config: SystemConfig

    @classmethod
    def deploy(
        cls,
        env: Optional[ChainEnvironment] = None,
        deployer: Optional[str] = None,
        config: Optional[SystemConfig] = None,
        token: Optional[PaymentToken] = None,
    ) -> "BondEscrowSystem":
        """Deploy and wire every contract; returns the assembled system.

        A pre-built ``token`` (owned by ``deployer``) replaces the default
        payment token.
        """
        env = env or ChainEnvironment()
        deployer = deployer or _address("deployer")
        config = config or get_global_config()

        token = token or PaymentToken(_address("payment-token"), deployer)
        certificates = BondCertificateRegistry(_address("bond-certificates"), deployer)
        ledger = RewardLedger(_address("reward-ledger"), deployer, token, config.staking)
        registry = AdjudicationRegistry(
            _address("adjudication-registry"), deployer, token, config.governance
        )
        escrow = EscrowCoordinator(
            _address("bond-escrow"),
            deployer,
            token,
            certificates,
            ledger,
            registry,
            config.escrow,
        )
        for contract in (token, certificates, ledger, registry, escrow):
            env.deploy(contract)

        env.transact(deployer, certificates.transfer_ownership, escrow.address)
        env.transact(deployer, ledger.set_trusted_caller, escrow.address)
        env.transact(deployer, registry.set_escrow_contract, escrow.address)

        if config.initial_reward_reserve > 0:
            env.transact(deployer, token.mint, ledger.address, config.initial_reward_reserve)

        logger.info(
            f"Bond escrow system deployed by {deployer}: escrow {escrow.address}, "
            f"reward reserve {config.initial_reward_reserve}"
        )
        return cls(
            env=env,
            deployer=deployer,
            token=token,
            certificates=certificates,
            ledger=ledger,
            registry=registry,
            escrow=escrow,
            config=config,
        )

    def fund(self, identity: str, amount: int, approve_escrow: bool = True) -> None:
        """Mint tokens to an identity and, by default, let the escrow spend them."""
        self.env.transact(self.deployer, self.token.mint, identity, amount)
        if approve_escrow:
            allowance = self.token.allowance(identity, self.escrow.address)
            self.env.transact(identity, self.token.approve, self.escrow.address, allowance + amount)

    def add_adjudicator(self, identity: str) -> bool:
        return self.env.transact(self.deployer, self.registry.grant_adjudicator, identity)

    def get_summary(self) -> Dict[str, Any]:
        """Balances and counters across the system."""
        return {
            "now": self.env.now,
            "bonds": self.escrow.bond_count(),
            "posted_bonds": self.escrow.posted_bond_count(),
            "proposals": self.registry.proposal_count(),
            "total_staked": self.ledger.total_staked(),
            "ledger_balance": self.token.balance_of(self.ledger.address),
            "escrow_balance": self.token.balance_of(self.escrow.address),
            "treasury_balance": self.registry.treasury_balance(),
            "events": len(self.env.event_log),
        }
