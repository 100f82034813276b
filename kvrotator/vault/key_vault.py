"""
Azure Key Vault backend built on the azure-keyvault SDK.

Usage:
    from azure.identity import DefaultAzureCredential
    from kvrotator.vault.key_vault import KeyVaultBackend

    backend = KeyVaultBackend("myvault", DefaultAzureCredential())
    secret = backend.get_secret_if_exists("db-password")
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from azure.core.exceptions import ResourceNotFoundError
from azure.keyvault.certificates import (
    CertificateClient,
    CertificateContentType,
    CertificateOperation,
    CertificatePolicy,
    KeyType,
    KeyUsageType,
    KeyVaultCertificate,
    WellKnownIssuerNames,
)
from azure.keyvault.secrets import KeyVaultSecret, SecretClient
from cryptography.hazmat.primitives.serialization import Encoding

from kvrotator.pem import parse_pem_certificates
from kvrotator.vault.backend import CertificateInfo, CertificateOperationStatus, SecretInfo

logger = logging.getLogger(__name__)

SERVER_AUTH_EKU = "1.3.6.1.5.5.7.3.1"
DEFAULT_SECRET_CONTENT_TYPE = "text/plain"


def vault_url(vault_name: str) -> str:
    return f"https://{vault_name.lower()}.vault.azure.net"


def build_certificate_policy(
    subject: str, key_strength: int, dns_names: list[str]
) -> CertificatePolicy:
    """Policy for an externally signed certificate, so Key Vault emits a CSR."""
    return CertificatePolicy(
        issuer_name=WellKnownIssuerNames.unknown,
        subject=subject,
        san_dns_names=list(dns_names),
        certificate_transparency=True,
        content_type=CertificateContentType.pem,
        enhanced_key_usage=[SERVER_AUTH_EKU],
        exportable=True,
        key_type=KeyType.rsa,
        key_size=key_strength,
        key_usage=[KeyUsageType.key_encipherment, KeyUsageType.data_encipherment],
        reuse_key=True,
        validity_in_months=12,
    )


def _secret_info(secret: KeyVaultSecret) -> SecretInfo:
    props = secret.properties
    return SecretInfo(
        name=secret.name or "",
        id=secret.id or "",
        content_type=props.content_type,
        enabled=bool(props.enabled),
        expires_on=props.expires_on,
        updated_on=props.updated_on,
    )


def _certificate_info(certificate: KeyVaultCertificate) -> CertificateInfo:
    props = certificate.properties
    thumbprint = props.x509_thumbprint.hex().upper() if props and props.x509_thumbprint else ""
    return CertificateInfo(
        name=certificate.name or "",
        id=certificate.id or "",
        thumbprint=thumbprint,
        enabled=bool(props.enabled) if props else False,
        expires_on=props.expires_on if props else None,
        updated_on=props.updated_on if props else None,
    )


def _operation_status(operation: CertificateOperation) -> CertificateOperationStatus:
    status = (operation.status or "").lower()
    cancelled = bool(operation.cancellation_requested) or status == "cancelled"
    return CertificateOperationStatus(
        is_started=status == "inprogress" and not cancelled,
        is_completed=status == "completed",
        is_cancelled=cancelled,
        csr=operation.csr,
    )


class KeyVaultBackend:
    """VaultBackend for one Azure Key Vault.

    SDK clients can be injected for testing; otherwise they are built from
    the vault name and credential.
    """

    def __init__(
        self,
        vault_name: str,
        credential: Any = None,
        *,
        secret_client: SecretClient | None = None,
        certificate_client: CertificateClient | None = None,
    ) -> None:
        self.vault_name = vault_name
        url = vault_url(vault_name)
        self._secrets = secret_client or SecretClient(url, credential)
        self._certificates = certificate_client or CertificateClient(url, credential)

    # ─── Secrets ─────────────────────────────────────────────────────────

    def get_secret_if_exists(self, name: str) -> SecretInfo | None:
        try:
            found = self._secrets.get_secret(name)
        except ResourceNotFoundError:
            logger.debug("get_secret_if_exists(%s): not found", name)
            return None
        info = _secret_info(found)
        logger.debug("get_secret_if_exists(%s): %s", name, info)
        return info

    def update_secret(
        self,
        name: str,
        value: str,
        expires_on: datetime | None = None,
        content_type: str | None = None,
    ) -> SecretInfo:
        result = self._secrets.set_secret(
            name,
            value,
            content_type=content_type or DEFAULT_SECRET_CONTENT_TYPE,
            expires_on=expires_on,
        )
        return _secret_info(result)

    # ─── Certificates ────────────────────────────────────────────────────

    def get_certificate_if_exists(self, name: str) -> CertificateInfo | None:
        try:
            found = self._certificates.get_certificate(name)
        except ResourceNotFoundError:
            logger.debug("get_certificate_if_exists(%s): not found", name)
            return None
        info = _certificate_info(found)
        logger.debug("get_certificate_if_exists(%s): %s", name, info)
        return info

    def import_certificate(
        self, name: str, data: bytes, password: str | None = None
    ) -> CertificateInfo:
        policy = CertificatePolicy(
            exportable=True, content_type=CertificateContentType.pkcs12
        )
        result = self._certificates.import_certificate(
            name, data, password=password or None, policy=policy
        )
        info = _certificate_info(result)
        logger.debug("import_certificate(%s): %s", name, info)
        return info

    def check_certificate_request(self, name: str) -> CertificateOperationStatus:
        try:
            operation = self._certificates.get_certificate_operation(name)
        except ResourceNotFoundError:
            logger.debug("check_certificate_request(%s): no operation", name)
            return CertificateOperationStatus()
        status = _operation_status(operation)
        logger.debug(
            "check_certificate_request(%s): started=%s completed=%s cancelled=%s",
            name,
            status.is_started,
            status.is_completed,
            status.is_cancelled,
        )
        return status

    def create_csr(
        self, name: str, subject: str, key_strength: int, dns_names: list[str]
    ) -> CertificateOperationStatus:
        policy = build_certificate_policy(subject, key_strength, dns_names)
        # The poller is not awaited: the operation stays pending until the
        # signed certificate is merged in a later run.
        self._certificates.begin_create_certificate(name, policy)
        status = self.check_certificate_request(name)
        logger.debug("create_csr(%s, %s): started=%s", name, subject, status.is_started)
        return status

    def merge_certificate(self, name: str, pem_bundle: str) -> CertificateInfo:
        certificates = parse_pem_certificates(pem_bundle)
        if not certificates:
            raise ValueError("No certificates found in PEM bundle")
        result = self._certificates.merge_certificate(
            name, [c.public_bytes(Encoding.DER) for c in certificates]
        )
        info = _certificate_info(result)
        logger.debug("merge_certificate(%s): %s", name, info)
        return info
