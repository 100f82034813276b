"""
Rotators: one per resource type.

    manual/secret                   operator-supplied secret value
    manual/certificate              operator-supplied PFX import
    azure/keyvault/ssl-certificate  CSR issued by the vault, signed externally
"""

from __future__ import annotations

from kvrotator.rotators.base import Rotator
from kvrotator.rotators.manual_certificate import ManualCertificateRotator
from kvrotator.rotators.manual_secret import ManualSecretRotator
from kvrotator.rotators.registry import RotatorRegistry
from kvrotator.rotators.ssl_certificate import KeyVaultSslCertificateRotator

__all__ = [
    "KeyVaultSslCertificateRotator",
    "ManualCertificateRotator",
    "ManualSecretRotator",
    "Rotator",
    "RotatorRegistry",
]
