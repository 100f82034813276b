"""
Rotator contract and the shared initialize/rotate skeleton.

Every rotator implements `Rotator`. The manual rotators share one control
flow, factored into the standalone helpers `initialize_if_absent` and
`rotate_if_due`:

    existence check -> due check -> variant write action

Both helpers run through `guarded`, so a backend fault becomes a failed
`RotationResult` instead of an exception escaping the rotator.

Usage:
    class MyRotator(Rotator):
        type = "example/secret"

        def initialize(self, configuration_id, resource):
            resource = self.scrub(resource)
            backend = self.backend_for(resource)
            return initialize_if_absent(
                configuration_id,
                resource.secret_name(configuration_id),
                lookup=backend.get_secret_if_exists,
                write=lambda: ...,
                force=self.settings.force,
            )
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from kvrotator.config import RotationSettings
from kvrotator.policy import Clock, days_until, should_rotate, utc_now
from kvrotator.resources import CertificateRequest, ManagedResource, ResourceSpec
from kvrotator.results import (
    InspectionResult,
    RotationResult,
    ScheduleContext,
    SecretContext,
)
from kvrotator.vault.backend import CertificateInfo, CertificateOperationStatus, VaultBackend
from kvrotator.vault.clients import VaultClientCache

logger = logging.getLogger(__name__)

DEFAULT_KEY_STRENGTH = 2048


class ExistingEntry(Protocol):
    @property
    def expires_on(self) -> datetime | None: ...


Lookup = Callable[[str], ExistingEntry | None]
WriteAction = Callable[[], RotationResult]


# ─── Shared skeleton ─────────────────────────────────────────────────────


def guarded(configuration_id: str, action: WriteAction) -> RotationResult:
    """Run `action`, converting any exception into a failed result."""
    try:
        return action()
    except Exception as e:
        logger.debug("Resource '%s' failed inside rotator", configuration_id, exc_info=True)
        return RotationResult.failed(configuration_id, e)


def initialize_if_absent(
    configuration_id: str,
    secret_name: str,
    *,
    lookup: Lookup,
    write: WriteAction,
    force: bool,
) -> RotationResult:
    """Create-if-absent: write only when nothing exists yet (or when forced)."""

    def run() -> RotationResult:
        if lookup(secret_name) is not None and not force:
            return RotationResult(
                configuration_id,
                False,
                "Secret already initialized",
                SecretContext(secret_name),
            )
        return write()

    return guarded(configuration_id, run)


def rotate_if_due(
    configuration_id: str,
    secret_name: str,
    *,
    lookup: Lookup,
    write: WriteAction,
    force: bool,
    overlap_days: int,
    now: datetime,
) -> RotationResult:
    """Rotate-if-due: write only when the existing entry is in its window (or forced)."""

    def run() -> RotationResult:
        found = lookup(secret_name)
        if found is None:
            return RotationResult(
                configuration_id,
                False,
                "Secret was not yet initialized",
                SecretContext(secret_name),
            )
        if not force and not should_rotate(found.expires_on, overlap_days, now=now):
            return RotationResult(
                configuration_id,
                False,
                "Not time to rotate yet",
                ScheduleContext(found.expires_on, overlap_days),
            )
        return write()

    return guarded(configuration_id, run)


def describe_certificate(
    certificate: CertificateInfo, status: CertificateOperationStatus, now: datetime
) -> str:
    """Human-readable status of a certificate for inspection reports."""
    if status.is_started:
        return "Certificate request started"
    if status.is_cancelled:
        return "Certificate cancelled"
    expired = certificate.expires_on is not None and days_until(certificate.expires_on, now) < 0
    if not certificate.enabled or expired:
        return "Certificate expired or disabled"
    return "Certificate valid"


# ─── Contract ────────────────────────────────────────────────────────────


class Rotator(ABC):
    """Lifecycle of one resource type: initialize, rotate, inspect.

    Attributes:
        type: Resource type tag this rotator handles (e.g. "manual/secret")
        aliases: Extra type tags resolved to this rotator
        default_content_type: Content type used when the resource sets none
        default_decode_base64: Whether input values are base64 unless configured
    """

    type: str
    aliases: tuple[str, ...] = ()
    default_content_type: str = "text/plain"
    default_decode_base64: bool = False

    def __init__(
        self,
        settings: RotationSettings,
        backends: VaultClientCache,
        clock: Clock = utc_now,
    ) -> None:
        self.settings = settings
        self.backends = backends
        self.clock = clock

    def apply_defaults(self, resource: ResourceSpec) -> ManagedResource:
        """Fill type-specific defaults on top of the configuration defaults."""
        certificate = None
        if resource.certificate is not None:
            spec = resource.certificate
            certificate = CertificateRequest(
                subject=spec.subject or "",
                dns_names=tuple(spec.dnsNames or ()),
                key_strength=spec.keyStrength or DEFAULT_KEY_STRENGTH,
                trust_chain_path=spec.trustChainPath or "",
                issued_certificate_path=spec.issuedCertificatePath or "",
            )

        return ManagedResource(
            type=resource.type or "",
            name=resource.name or "",
            resource_group=resource.resourceGroup or "",
            key_vault=resource.keyVault or "",
            key_vault_secret_prefix=resource.keyVaultSecretPrefix or "",
            expiration_days=resource.expirationDays,
            expiration_overlap_days=resource.expirationOverlapDays or 0,
            content_type=resource.contentType or self.default_content_type,
            decode_base64=(
                resource.decodeBase64
                if resource.decodeBase64 is not None
                else self.default_decode_base64
            ),
            certificate=certificate,
        )

    def scrub(self, resource: ResourceSpec | ManagedResource) -> ManagedResource:
        if isinstance(resource, ManagedResource):
            return resource
        return self.apply_defaults(resource)

    def backend_for(self, resource: ManagedResource) -> VaultBackend:
        return self.backends.get(resource.key_vault)

    def is_due(self, expires_on: datetime | None, resource: ManagedResource) -> bool:
        return should_rotate(expires_on, resource.expiration_overlap_days, now=self.clock())

    @abstractmethod
    def initialize(
        self, configuration_id: str, resource: ResourceSpec | ManagedResource
    ) -> RotationResult:
        """Create the credential if it does not exist yet (or when forced)."""

    @abstractmethod
    def rotate(
        self, configuration_id: str, resource: ResourceSpec | ManagedResource
    ) -> RotationResult:
        """Replace the credential when it is inside its rotation window (or forced)."""

    @abstractmethod
    def inspect(
        self, configuration_id: str, resource: ResourceSpec | ManagedResource
    ) -> InspectionResult:
        """Report the current state of the credential without changing it."""
