"""
Manual certificate rotator: imports an operator-supplied PFX into the vault.

`secret_value_1` carries the PFX (base64 by default) and `secret_value_2`
the optional import password.
"""

from __future__ import annotations

import base64

from kvrotator.resources import ManagedResource, ResourceSpec
from kvrotator.results import InspectionResult, RotationResult, WriteContext
from kvrotator.rotators.base import (
    Rotator,
    describe_certificate,
    initialize_if_absent,
    rotate_if_due,
)


class ManualCertificateRotator(Rotator):
    type = "manual/certificate"
    default_content_type = "application/x-pkcs12"
    default_decode_base64 = True

    def initialize(
        self, configuration_id: str, resource: ResourceSpec | ManagedResource
    ) -> RotationResult:
        resource = self.scrub(resource)
        secret_name = resource.secret_name(configuration_id)
        return initialize_if_absent(
            configuration_id,
            secret_name,
            lookup=lambda name: self.backend_for(resource).get_certificate_if_exists(name),
            write=lambda: self._import(configuration_id, resource, secret_name),
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
            lookup=lambda name: self.backend_for(resource).get_certificate_if_exists(name),
            write=lambda: self._import(configuration_id, resource, secret_name),
            force=self.settings.force,
            overlap_days=resource.expiration_overlap_days,
            now=self.clock(),
        )

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

    def _import(
        self,
        configuration_id: str,
        resource: ManagedResource,
        secret_name: str,
    ) -> RotationResult:
        backend = self.backend_for(resource)
        value = self.settings.secret_value_1
        pfx = (
            base64.b64decode(value, validate=True)
            if resource.decode_base64
            else value.encode("utf-8")
        )

        if self.settings.what_if:
            return RotationResult(configuration_id, True, "what-if", WriteContext())

        result = backend.import_certificate(
            secret_name, pfx, self.settings.secret_value_2 or None
        )
        return RotationResult(
            configuration_id,
            True,
            "",
            WriteContext(id=result.id, expiration=result.expires_on),
        )
