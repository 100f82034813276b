"""Rotator registry: resolves a resource type tag to its rotator."""

from __future__ import annotations

import logging

from kvrotator.config import RotationSettings
from kvrotator.policy import Clock, utc_now
from kvrotator.rotators.base import Rotator
from kvrotator.rotators.manual_certificate import ManualCertificateRotator
from kvrotator.rotators.manual_secret import ManualSecretRotator
from kvrotator.rotators.ssl_certificate import KeyVaultSslCertificateRotator
from kvrotator.vault.clients import VaultClientCache

logger = logging.getLogger(__name__)

BUILTIN_ROTATORS: tuple[type[Rotator], ...] = (
    ManualSecretRotator,
    ManualCertificateRotator,
    KeyVaultSslCertificateRotator,
)


class RotatorRegistry:
    """Type tag -> rotator lookup. Tags are matched case-insensitively."""

    def __init__(self) -> None:
        self._rotators: dict[str, Rotator] = {}

    def register(self, rotator: Rotator) -> None:
        for tag in (rotator.type, *rotator.aliases):
            key = tag.lower()
            if key in self._rotators:
                logger.warning("Rotator type '%s' registered twice, replacing", tag)
            self._rotators[key] = rotator

    def resolve(self, resource_type: str | None) -> Rotator | None:
        if not resource_type:
            return None
        return self._rotators.get(resource_type.lower())

    def types(self) -> list[str]:
        return sorted(self._rotators)

    def __contains__(self, resource_type: str) -> bool:
        return self.resolve(resource_type) is not None

    @classmethod
    def default(
        cls,
        settings: RotationSettings,
        backends: VaultClientCache,
        clock: Clock = utc_now,
    ) -> RotatorRegistry:
        """Registry holding every built-in rotator."""
        registry = cls()
        for rotator_cls in BUILTIN_ROTATORS:
            registry.register(rotator_cls(settings, backends, clock))
        return registry
