"""
Manual secret rotator: stores an operator-supplied value as a vault secret.

The new value comes from `secret_value_1` of the run settings, optionally
base64-decoded, and is written with a fresh expiration of
`now + expiration_days`.
"""

from __future__ import annotations

import base64

from kvrotator.policy import add_days, days_until
from kvrotator.resources import ManagedResource, ResourceSpec
from kvrotator.results import InspectionResult, RotationResult, WriteContext
from kvrotator.rotators.base import Rotator, initialize_if_absent, rotate_if_due


def decode_secret_value(value: str, decode_base64: bool) -> str:
    if not decode_base64:
        return value
    return base64.b64decode(value, validate=True).decode("utf-8")


class ManualSecretRotator(Rotator):
    type = "manual/secret"
    aliases = ("manual/generic",)

    def initialize(
        self, configuration_id: str, resource: ResourceSpec | ManagedResource
    ) -> RotationResult:
        resource = self.scrub(resource)
        secret_name = resource.secret_name(configuration_id)
        return initialize_if_absent(
            configuration_id,
            secret_name,
            lookup=lambda name: self.backend_for(resource).get_secret_if_exists(name),
            write=lambda: self._write(configuration_id, resource, secret_name),
            force=self.settings.force,
        )

    def rotate(
        self, configuration_id: str, resource: ResourceSpec | ManagedResource
    ) -> RotationResult:
        resource = self.scrub(resource)
        secret_name = resource.secret_name(configuration_id)
        return rotate_if_due(
            configuration_id,
            secret_name,
            lookup=lambda name: self.backend_for(resource).get_secret_if_exists(name),
            write=lambda: self._write(configuration_id, resource, secret_name),
            force=self.settings.force,
            overlap_days=resource.expiration_overlap_days,
            now=self.clock(),
        )

    def inspect(
        self, configuration_id: str, resource: ResourceSpec | ManagedResource
    ) -> InspectionResult:
        resource = self.scrub(resource)
        backend = self.backend_for(resource)
        secret = backend.get_secret_if_exists(resource.secret_name(configuration_id))
        if secret is None:
            return InspectionResult(configuration_id, self.type, "", "Secret not found")

        now = self.clock()
        if not secret.enabled or (
            secret.expires_on is not None and days_until(secret.expires_on, now) < 0
        ):
            notes = "Secret expired or disabled"
        elif self.is_due(secret.expires_on, resource):
            notes = "Rotation due"
        else:
            notes = "Secret valid"

        return InspectionResult(
            configuration_id,
            self.type,
            secret.id,
            notes,
            updated_on=secret.updated_on,
            expires_on=secret.expires_on,
        )

    def _write(
        self,
        configuration_id: str,
        resource: ManagedResource,
        secret_name: str,
    ) -> RotationResult:
        backend = self.backend_for(resource)
        expiration = (
            add_days(self.clock(), resource.expiration_days)
            if resource.expiration_days
            else None
        )
        value = decode_secret_value(self.settings.secret_value_1, resource.decode_base64)

        if self.settings.what_if:
            return RotationResult(
                configuration_id, True, "what-if", WriteContext(expiration=expiration)
            )

        result = backend.update_secret(secret_name, value, expiration, resource.content_type)
        return RotationResult(
            configuration_id,
            True,
            "",
            WriteContext(id=result.id, expiration=result.expires_on),
        )
