"""Tests for kvrotator.operations: iteration and reports."""

from datetime import timedelta

import pytest

from kvrotator.config import RotationSettings
from kvrotator.errors import OperationError
from kvrotator.operations import (
    InitializeOperation,
    InspectOperation,
    ManualSecretOperation,
    NothingOperation,
    OperationRegistry,
    RequestCsrOperation,
    RotateOperation,
)
from kvrotator.resources import ConfigurationFile, ResourceSpec
from kvrotator.rotators import RotatorRegistry
from kvrotator.vault.backend import CertificateOperationStatus, SecretInfo


def spec(**fields):
    fields.setdefault("keyVault", "kv-test")
    return ResourceSpec.model_validate(fields)


@pytest.fixture
def configuration():
    return ConfigurationFile(
        resources={
            "db": spec(type="manual/secret", expirationOverlapDays=30),
            "legacy": spec(type="aws/iam-key"),
            "api": spec(type="manual/generic", expirationOverlapDays=30),
        }
    )


@pytest.fixture
def make_operation(backends, clock):
    def _make(cls, **settings):
        rotation = RotationSettings(**{"secret_value_1": "v", **settings})
        return cls(rotation, RotatorRegistry.default(rotation, backends, clock))

    return _make


class TestResourceOperation:
    def test_unknown_type_skipped(self, make_operation, configuration, backend, caplog):
        backend.update_secret.return_value = SecretInfo(name="x")

        with caplog.at_level("WARNING"):
            report = make_operation(InitializeOperation).run(configuration, ["*"])

        assert report.skipped == ["legacy"]
        assert report.rotated == ["db", "api"]
        assert "not a supported resource type" in caplog.text

    def test_results_in_configuration_order(self, make_operation, configuration, backend):
        backend.update_secret.return_value = SecretInfo(name="x")
        report = make_operation(InitializeOperation).run(configuration, ["api", "db"])
        assert [r.name for r in report.results] == ["db", "api"]

    def test_not_processed_logged(self, make_operation, configuration, backend, now, caplog):
        backend.get_secret_if_exists.return_value = SecretInfo(
            name="db", expires_on=now + timedelta(days=90)
        )

        with caplog.at_level("WARNING"):
            report = make_operation(RotateOperation).run(configuration, ["db"])

        assert report.rotated == []
        assert "was not processed: Not time to rotate yet" in caplog.text

    def test_error_isolated(self, make_operation, configuration, backend, caplog):
        backend.get_secret_if_exists.side_effect = [RuntimeError("boom"), None]

        with caplog.at_level("ERROR"):
            report = make_operation(InspectOperation).run(configuration, [])

        assert report.errors == ["db"]
        assert [i.name for i in report.inspections] == ["api"]
        assert "encountered an error" in caplog.text

    def test_guarded_failure_is_a_result(self, make_operation, configuration, backend):
        backend.get_secret_if_exists.side_effect = RuntimeError("boom")

        report = make_operation(RotateOperation).run(configuration, ["db"])

        assert report.errors == []
        assert report.results[0].notes == "boom"


class TestInspectOperation:
    def test_rows(self, make_operation, configuration, backend):
        report = make_operation(InspectOperation).run(configuration, ["db"])

        rows = report.inspection_rows()
        assert rows[0] == [
            "name", "type", "secretId", "resourceId", "expiresOn", "updatedOn", "notes"
        ]
        assert rows[1][0] == "db"
        assert rows[1][-1] == "Secret not found"
        backend.update_secret.assert_not_called()


class TestRequestCsrOperation:
    def test_collects_artifacts(self, make_operation, backend):
        configuration = ConfigurationFile(
            resources={
                "web": spec(
                    type="azure/keyvault/ssl-certificate",
                    certificate={"subject": "CN=web", "dnsNames": ["web.example.com"]},
                ),
                "bad": spec(type="azure/keyvault/ssl-certificate"),
            }
        )
        backend.create_csr.return_value = CertificateOperationStatus(
            is_started=True, csr=bytes([1, 2, 3, 4])
        )

        report = make_operation(RequestCsrOperation).run(configuration, ["*"])

        assert list(report.artifacts) == ["web"]
        assert "AQIDBA==" in report.artifacts["web"]
        assert report.rotated == ["web"]

    def test_what_if_has_no_artifacts(self, make_operation, backend):
        configuration = ConfigurationFile(
            resources={
                "web": spec(
                    type="azure/keyvault/ssl-certificate",
                    certificate={"subject": "CN=web", "dnsNames": ["web.example.com"]},
                )
            }
        )
        report = make_operation(RequestCsrOperation, what_if=True).run(configuration, [])
        assert report.artifacts == {}
        backend.create_csr.assert_not_called()


class TestManualSecretOperation:
    def test_rotates_single_target(self, make_operation, configuration, backend, now):
        backend.get_secret_if_exists.return_value = SecretInfo(
            name="db", expires_on=now + timedelta(days=1)
        )
        backend.update_secret.return_value = SecretInfo(name="db", id="new")

        report = make_operation(ManualSecretOperation).run(configuration, ["db"])

        assert report.rotated == ["db"]
        backend.update_secret.assert_called_once()

    @pytest.mark.parametrize("targets", [[], ["*"], ["db", "api"]])
    def test_requires_exactly_one_target(self, make_operation, configuration, targets):
        with pytest.raises(OperationError, match="single resource"):
            make_operation(ManualSecretOperation).run(configuration, targets)

    def test_missing_target(self, make_operation, configuration):
        with pytest.raises(OperationError, match="not found"):
            make_operation(ManualSecretOperation).run(configuration, ["nope"])


class TestNothingOperation:
    def test_no_backend_calls(self, make_operation, configuration, backend):
        report = make_operation(NothingOperation).run(configuration, ["*"])
        assert report.results == []
        assert backend.method_calls == []


class TestOperationRegistry:
    def test_names(self, backends, clock):
        rotation = RotationSettings()
        registry = OperationRegistry.default(
            rotation, RotatorRegistry.default(rotation, backends, clock)
        )
        assert registry.names() == [
            "nothing", "initialize", "rotate", "request-csr", "inspect", "manual-secret"
        ]
        assert isinstance(registry.resolve("Request-CSR"), RequestCsrOperation)
        assert registry.resolve("unknown") is None
