"""
SSL certificate rotator: certificates signed by an external CA through a CSR.

Rotation spans two runs:

1. `initialize` asks the vault to start a certificate operation and returns
   the PEM-wrapped CSR for the operator to get signed. While the operation
   is pending, repeated calls hand back the same CSR.
2. `rotate` merges the signed certificate (trust chain first, then the
   issued certificate, both read from disk) into the pending operation.

Both phases honor the overlap window unless `force` is set, and validate
the certificate policy and input files before touching the vault.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from kvrotator.pem import wrap_csr
from kvrotator.resources import CertificateRequest, ManagedResource, ResourceSpec
from kvrotator.results import (
    CsrContext,
    EmptyContext,
    ErrorContext,
    InspectionResult,
    MergeContext,
    RotationResult,
    ScheduleContext,
    SecretContext,
)
from kvrotator.rotators.base import Rotator, describe_certificate, guarded
from kvrotator.vault.backend import CertificateRequestState, VaultBackend

logger = logging.getLogger(__name__)

VALID_KEY_STRENGTHS = (2048, 3072, 4096)

CSR_PENDING = "Certificate request in progress, check for CSR"


def validate_certificate_request(certificate: CertificateRequest | None) -> str | None:
    """Return a validation message for an unusable CSR policy, else None."""
    if certificate is None or not certificate.subject:
        return "Certificate subject is required to request CSR"
    if not any(name.strip() for name in certificate.dns_names):
        return "Certificate dnsNames must contain at least one DNS name"
    if certificate.key_strength not in VALID_KEY_STRENGTHS:
        return "Certificate keyStrength must be 2048, 3072, or 4096"
    return None


def _read_pem_file(path: str) -> tuple[str | None, str | None]:
    """Read a PEM file. Returns (content, None) or (None, error)."""
    p = Path(path)
    if not p.is_file():
        return None, f"Certificate file not found: {path}"
    content = p.read_text(encoding="utf-8")
    if not content.strip():
        return None, f"Certificate file is empty: {path}"
    return content, None


def load_signed_chain(certificate: CertificateRequest) -> tuple[str | None, str | None]:
    """Concatenate trust chain and issued certificate, in that order.

    The trust chain is optional; the issued certificate is required.

    Returns:
        (pem_bundle, None) on success, (None, error) otherwise.
    """
    if not certificate.issued_certificate_path:
        return None, "Issued certificate path is required to merge a certificate"

    trust_chain = ""
    if certificate.trust_chain_path:
        content, error = _read_pem_file(certificate.trust_chain_path)
        if error:
            return None, error
        trust_chain = content or ""
        if not trust_chain.endswith("\n"):
            trust_chain += "\n"

    issued, error = _read_pem_file(certificate.issued_certificate_path)
    if error:
        return None, error

    return trust_chain + (issued or ""), None


class KeyVaultSslCertificateRotator(Rotator):
    type = "azure/keyvault/ssl-certificate"
    default_content_type = "application/x-pem-file"
    # The CSR flow never decodes operator input, so certificates of this
    # type do not inherit the base64 default of manual certificates.
    default_decode_base64 = False

    def apply_defaults(self, resource: ResourceSpec) -> ManagedResource:
        managed = super().apply_defaults(resource)
        if managed.certificate is None:
            managed = replace(managed, certificate=CertificateRequest())
        return managed

    # ─── Phase 1: request CSR ────────────────────────────────────────────

    def initialize(
        self, configuration_id: str, resource: ResourceSpec | ManagedResource
    ) -> RotationResult:
        """Start (or resume) a certificate request.

        Returns:
            Rotation result whose context is a CsrContext; `csr` is empty
            when no request is pending or was started.
        """
        resource = self.scrub(resource)
        return guarded(configuration_id, lambda: self._initialize(configuration_id, resource))

    def _initialize(self, configuration_id: str, resource: ManagedResource) -> RotationResult:
        certificate = resource.certificate
        error = validate_certificate_request(certificate)
        if error or certificate is None:
            return RotationResult(configuration_id, False, error or "", CsrContext(""))

        backend = self.backend_for(resource)
        secret_name = resource.secret_name(configuration_id)
        found = backend.get_certificate_if_exists(secret_name)

        if found is not None:
            status = backend.check_certificate_request(secret_name)
            if status.state is CertificateRequestState.STARTED and not self.settings.force:
                # Pending request: hand back the CSR already issued
                return RotationResult(
                    configuration_id, True, CSR_PENDING, CsrContext(wrap_csr(status.csr))
                )
            if not self.is_due(found.expires_on, resource) and not self.settings.force:
                return RotationResult(
                    configuration_id, False, "Not time to rotate yet", CsrContext("")
                )

        return self._request_csr(configuration_id, secret_name, certificate, backend)

    def _request_csr(
        self,
        configuration_id: str,
        secret_name: str,
        certificate: CertificateRequest,
        backend: VaultBackend,
    ) -> RotationResult:
        if self.settings.what_if:
            return RotationResult(configuration_id, True, "what-if", CsrContext(""))

        status = backend.create_csr(
            secret_name,
            certificate.subject,
            certificate.key_strength,
            list(certificate.dns_names),
        )
        if not status.csr:
            return RotationResult(
                configuration_id,
                False,
                "Unknown error getting CSR after certificate creation was started",
                CsrContext(""),
            )

        logger.debug("Issued CSR for '%s' (%s)", configuration_id, secret_name)
        return RotationResult(configuration_id, True, CSR_PENDING, CsrContext(wrap_csr(status.csr)))

    # ─── Phase 2: merge signed certificate ───────────────────────────────

    def rotate(
        self, configuration_id: str, resource: ResourceSpec | ManagedResource
    ) -> RotationResult:
        resource = self.scrub(resource)
        return guarded(configuration_id, lambda: self._rotate(configuration_id, resource))

    def _rotate(self, configuration_id: str, resource: ManagedResource) -> RotationResult:
        backend = self.backend_for(resource)
        secret_name = resource.secret_name(configuration_id)

        found = backend.get_certificate_if_exists(secret_name)
        if found is None:
            return RotationResult(
                configuration_id,
                False,
                "No certificate found, initialize first",
                SecretContext(secret_name),
            )

        status = backend.check_certificate_request(secret_name)
        if status.state is not CertificateRequestState.STARTED:
            return RotationResult(
                configuration_id,
                False,
                "CSR not generated, initialize first",
                SecretContext(secret_name),
            )
        if not self.is_due(found.expires_on, resource) and not self.settings.force:
            return RotationResult(
                configuration_id,
                False,
                "Not time to rotate yet, wait for overlap period or try to force",
                ScheduleContext(found.expires_on, resource.expiration_overlap_days),
            )

        bundle, error = load_signed_chain(resource.certificate or CertificateRequest())
        if error:
            return RotationResult(configuration_id, False, error, ErrorContext(error))

        if self.settings.what_if:
            return RotationResult(configuration_id, True, "what-if", EmptyContext())

        merged = backend.merge_certificate(secret_name, bundle or "")
        return RotationResult(
            configuration_id, True, "Certificate merged", MergeContext(merged.thumbprint)
        )

    # ─── Inspection ──────────────────────────────────────────────────────

    def inspect(
        self, configuration_id: str, resource: ResourceSpec | ManagedResource
    ) -> InspectionResult:
        resource = self.scrub(resource)
        backend = self.backend_for(resource)
        secret_name = resource.secret_name(configuration_id)

        certificate = backend.get_certificate_if_exists(secret_name)
        if certificate is None:
            return InspectionResult(configuration_id, self.type, "", "Certificate not found")

        status = backend.check_certificate_request(secret_name)
        return InspectionResult(
            configuration_id,
            self.type,
            certificate.id,
            describe_certificate(certificate, status, self.clock()),
            updated_on=certificate.updated_on,
            expires_on=certificate.expires_on,
        )
