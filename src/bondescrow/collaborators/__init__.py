"""External collaborators of the escrow: interfaces and in-memory implementations."""

from .certificates import BondCertificateRegistry, Certificate, CertificateRegistryState
from .interfaces import CertificateRegistry, PaymentLedger
from .token import PaymentToken, PaymentTokenState

__all__ = [
    "BondCertificateRegistry",
    "Certificate",
    "CertificateRegistry",
    "CertificateRegistryState",
    "PaymentLedger",
    "PaymentToken",
    "PaymentTokenState",
]
