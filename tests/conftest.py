"""
Test fixtures for the rotation engine.

- A MagicMock vault backend behind a real VaultClientCache
- A fixed clock so rotation windows are deterministic
- On-the-fly X.509 certificates for PEM and merge tests
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from kvrotator.config import RotationSettings
from kvrotator.resources import ResourceSpec
from kvrotator.vault.backend import CertificateOperationStatus, VaultBackend
from kvrotator.vault.clients import VaultClientCache

NOW = datetime(2023, 1, 2, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock(now: datetime) -> Callable[[], datetime]:
    return lambda: now


@pytest.fixture
def backend() -> MagicMock:
    """Vault backend where nothing exists yet and no request is pending."""
    mock = MagicMock(spec=VaultBackend)
    mock.get_secret_if_exists.return_value = None
    mock.get_certificate_if_exists.return_value = None
    mock.check_certificate_request.return_value = CertificateOperationStatus()
    return mock


@pytest.fixture
def backends(backend: MagicMock) -> VaultClientCache:
    return VaultClientCache(lambda name: backend)


@pytest.fixture
def settings() -> RotationSettings:
    return RotationSettings(secret_value_1="s3cr3t")


@pytest.fixture
def make_resource() -> Callable[..., ResourceSpec]:
    """Build a ResourceSpec from camelCase keys, as the config file would."""

    def _make(**fields) -> ResourceSpec:
        fields.setdefault("keyVault", "kv-test")
        return ResourceSpec.model_validate(fields)

    return _make


def make_certificate_pem(common_name: str = "example.com", days: int = 30) -> str:
    """Self-signed EC certificate in PEM form."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    issued = datetime.now(UTC)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(issued - timedelta(days=1))
        .not_valid_after(issued + timedelta(days=days))
        .sign(key, hashes.SHA256())
    )
    return certificate.public_bytes(serialization.Encoding.PEM).decode("ascii")


@pytest.fixture
def certificate_pem() -> Callable[..., str]:
    return make_certificate_pem
