"""
Vault backend contract consumed by the rotators.

Rotators never talk to a vault SDK directly; they go through a
`VaultBackend`. Lookups return None when the entry does not exist and
raise on any other fault.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Protocol


class CertificateRequestState(StrEnum):
    STARTED = "started"
    COMPLETED_OR_CANCELLED = "completed_or_cancelled"


@dataclass(frozen=True)
class SecretInfo:
    """Metadata of a stored secret (the value is never carried here)."""

    name: str
    id: str = ""
    content_type: str | None = None
    enabled: bool = True
    expires_on: datetime | None = None
    updated_on: datetime | None = None


@dataclass(frozen=True)
class CertificateInfo:
    name: str
    id: str = ""
    thumbprint: str = ""
    enabled: bool = True
    expires_on: datetime | None = None
    updated_on: datetime | None = None


@dataclass(frozen=True)
class CertificateOperationStatus:
    """Status of the pending (or last) certificate creation operation."""

    is_started: bool = False
    is_completed: bool = False
    is_cancelled: bool = False
    csr: bytes | None = None

    @property
    def state(self) -> CertificateRequestState:
        if self.is_started:
            return CertificateRequestState.STARTED
        return CertificateRequestState.COMPLETED_OR_CANCELLED


class VaultBackend(Protocol):
    def get_secret_if_exists(self, name: str) -> SecretInfo | None: ...

    def update_secret(
        self,
        name: str,
        value: str,
        expires_on: datetime | None = None,
        content_type: str | None = None,
    ) -> SecretInfo: ...

    def get_certificate_if_exists(self, name: str) -> CertificateInfo | None: ...

    def import_certificate(
        self, name: str, data: bytes, password: str | None = None
    ) -> CertificateInfo: ...

    def check_certificate_request(self, name: str) -> CertificateOperationStatus: ...

    def create_csr(
        self, name: str, subject: str, key_strength: int, dns_names: list[str]
    ) -> CertificateOperationStatus: ...

    def merge_certificate(self, name: str, pem_bundle: str) -> CertificateInfo: ...
