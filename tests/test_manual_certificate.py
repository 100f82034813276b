"""Tests for the manual certificate (PFX import) rotator."""

import base64
from datetime import timedelta

import pytest

from kvrotator.config import RotationSettings
from kvrotator.results import ErrorContext, SecretContext, WriteContext
from kvrotator.rotators.manual_certificate import ManualCertificateRotator
from kvrotator.vault.backend import CertificateInfo, CertificateOperationStatus
from kvrotator.vault.clients import VaultClientCache

PFX = b"\x30\x82\x01\x00fake-pfx"


@pytest.fixture
def pfx_settings():
    return RotationSettings(secret_value_1=base64.b64encode(PFX).decode(), secret_value_2="pw")


@pytest.fixture
def rotator(pfx_settings, backends, clock):
    return ManualCertificateRotator(pfx_settings, backends, clock)


@pytest.fixture
def resource(make_resource):
    return make_resource(type="manual/certificate", expirationOverlapDays=30)


def existing(now, days_left, **kwargs):
    return CertificateInfo(
        name="web",
        id="https://kv-test.vault.azure.net/certificates/web/1",
        thumbprint="AB12",
        expires_on=now + timedelta(days=days_left),
        **kwargs,
    )


class TestDefaults:
    def test_pkcs12_and_base64(self, rotator, resource):
        managed = rotator.apply_defaults(resource)
        assert managed.content_type == "application/x-pkcs12"
        assert managed.decode_base64 is True


class TestInitialize:
    def test_imports_decoded_pfx(self, rotator, resource, backend, now):
        backend.import_certificate.return_value = existing(now, 365)

        result = rotator.initialize("web", resource)

        assert result.rotated is True
        backend.import_certificate.assert_called_once_with("web", PFX, "pw")
        assert result.context == WriteContext(
            id="https://kv-test.vault.azure.net/certificates/web/1",
            expiration=now + timedelta(days=365),
        )

    def test_empty_password_is_none(self, backends, clock, resource, backend, now):
        backend.import_certificate.return_value = existing(now, 365)
        rotator = ManualCertificateRotator(
            RotationSettings(secret_value_1=base64.b64encode(PFX).decode()), backends, clock
        )

        rotator.initialize("web", resource)

        backend.import_certificate.assert_called_once_with("web", PFX, None)

    def test_already_initialized(self, rotator, resource, backend, now):
        backend.get_certificate_if_exists.return_value = existing(now, 100)

        result = rotator.initialize("web", resource)

        assert result.rotated is False
        assert result.notes == "Secret already initialized"
        assert result.context == SecretContext("web")
        backend.import_certificate.assert_not_called()


class TestRotate:
    def test_not_initialized(self, rotator, resource, backend):
        result = rotator.rotate("web", resource)
        assert result.notes == "Secret was not yet initialized"
        backend.import_certificate.assert_not_called()

    def test_not_due(self, rotator, resource, backend, now):
        backend.get_certificate_if_exists.return_value = existing(now, 100)
        assert rotator.rotate("web", resource).notes == "Not time to rotate yet"
        backend.import_certificate.assert_not_called()

    def test_due(self, rotator, resource, backend, now):
        backend.get_certificate_if_exists.return_value = existing(now, 20)
        backend.import_certificate.return_value = existing(now, 365)
        assert rotator.rotate("web", resource).rotated is True

    def test_what_if(self, backends, clock, resource, backend, now):
        backend.get_certificate_if_exists.return_value = existing(now, 20)
        rotator = ManualCertificateRotator(
            RotationSettings(what_if=True, secret_value_1=base64.b64encode(PFX).decode()),
            backends,
            clock,
        )

        result = rotator.rotate("web", resource)

        assert result.rotated is True
        assert result.notes == "what-if"
        assert result.context == WriteContext()
        backend.import_certificate.assert_not_called()

    def test_invalid_base64_is_failed_result(self, backends, clock, resource, backend, now):
        backend.get_certificate_if_exists.return_value = existing(now, 20)
        rotator = ManualCertificateRotator(
            RotationSettings(secret_value_1="%%%"), backends, clock
        )

        result = rotator.rotate("web", resource)

        assert result.rotated is False
        backend.import_certificate.assert_not_called()


class TestInspect:
    def test_not_found(self, rotator, resource):
        assert rotator.inspect("web", resource).notes == "Certificate not found"

    def test_valid(self, rotator, resource, backend, now):
        backend.get_certificate_if_exists.return_value = existing(now, 100)
        result = rotator.inspect("web", resource)
        assert result.notes == "Certificate valid"
        assert result.type == "manual/certificate"

    def test_request_started(self, rotator, resource, backend, now):
        backend.get_certificate_if_exists.return_value = existing(now, 100)
        backend.check_certificate_request.return_value = CertificateOperationStatus(
            is_started=True
        )
        assert rotator.inspect("web", resource).notes == "Certificate request started"

    def test_cancelled(self, rotator, resource, backend, now):
        backend.get_certificate_if_exists.return_value = existing(now, 100)
        backend.check_certificate_request.return_value = CertificateOperationStatus(
            is_cancelled=True
        )
        assert rotator.inspect("web", resource).notes == "Certificate cancelled"

    def test_expired(self, rotator, resource, backend, now):
        backend.get_certificate_if_exists.return_value = existing(now, -1)
        assert rotator.inspect("web", resource).notes == "Certificate expired or disabled"

    def test_disabled(self, rotator, resource, backend, now):
        backend.get_certificate_if_exists.return_value = existing(now, 100, enabled=False)
        assert rotator.inspect("web", resource).notes == "Certificate expired or disabled"


def unreachable_vault(name):
    raise ConnectionError(f"cannot reach {name}")


class TestBackendConstruction:
    @pytest.fixture
    def rotator(self, pfx_settings, clock):
        return ManualCertificateRotator(pfx_settings, VaultClientCache(unreachable_vault), clock)

    def test_initialize_returns_failed_result(self, rotator, resource):
        result = rotator.initialize("web", resource)
        assert result.rotated is False
        assert result.notes == "cannot reach kv-test"
        assert isinstance(result.context, ErrorContext)

    def test_rotate_returns_failed_result(self, rotator, resource):
        result = rotator.rotate("web", resource)
        assert result.rotated is False
        assert isinstance(result.context, ErrorContext)
