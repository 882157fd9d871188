"""
bondescrow: escrow for bonded assets.

Issuers publish bond terms, posters lock payment tokens against them and
receive a certificate, the locked funds earn staking rewards, and a
governance process can redirect them to the issuer when a leak is
adjudicated. Otherwise the certificate holder is paid at expiry.
"""

__version__ = "0.1.0"
__author__ = "Bond Escrow Team"

from .chain import Account, ChainEnvironment, TransactionContext
from .collaborators import BondCertificateRegistry, PaymentToken
from .config import SystemConfig
from .errors import BondEscrowError
from .escrow import BondEscrowSystem, EscrowCoordinator, SettlementOutcome
from .governance import AdjudicationRegistry, ProposalStatus
from .staking import RewardLedger

__all__ = [
    "Account",
    "AdjudicationRegistry",
    "BondCertificateRegistry",
    "BondEscrowError",
    "BondEscrowSystem",
    "ChainEnvironment",
    "EscrowCoordinator",
    "PaymentToken",
    "ProposalStatus",
    "RewardLedger",
    "SettlementOutcome",
    "SystemConfig",
    "TransactionContext",
]
