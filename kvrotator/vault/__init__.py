"""
Vault access for the rotation engine.

`backend` defines the contract rotators depend on, `clients` caches one
backend per vault for the duration of a run, and `key_vault` implements
the contract on top of Azure Key Vault.
"""

from __future__ import annotations

from kvrotator.vault.backend import (
    CertificateInfo,
    CertificateOperationStatus,
    CertificateRequestState,
    SecretInfo,
    VaultBackend,
)
from kvrotator.vault.clients import VaultClientCache

__all__ = [
    "CertificateInfo",
    "CertificateOperationStatus",
    "CertificateRequestState",
    "SecretInfo",
    "VaultBackend",
    "VaultClientCache",
]
