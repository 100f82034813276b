"""
Managed resources: the configuration file schema and the defaulted model.

A configuration file declares `defaults` plus a mapping of configuration id
to partial resource. Defaults are merged into every resource when the file
is loaded; rotators then fill their type-specific defaults via
`apply_defaults`, so every rotator works with a fully populated
`ManagedResource`.

Usage:
    from kvrotator.resources import filter_resources, load_configuration

    configuration = load_configuration("rotation.yaml")
    for entry in filter_resources(configuration, ["*"]):
        print(entry.id, entry.resource.type)

Example file (YAML; JSON with the same keys also works):

    defaults:
      keyVault: vault1
      expirationDays: 90
      expirationOverlapDays: 30
    resources:
      appCertificate1:
        type: azure/keyvault/ssl-certificate
        expirationOverlapDays: 60
        certificate:
          subject: CN=app.company.com
          dnsNames: [app.company.com]
          keyStrength: 2048
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from kvrotator.errors import ConfigurationError

logger = logging.getLogger(__name__)

WILDCARD = "*"

# Spellings accepted for the certificate sub-record, in order of precedence
CERTIFICATE_KEYS = ("certificateRequest", "certificate")


# ─── File schema ─────────────────────────────────────────────────────────


class CertificateRequestSpec(BaseModel):
    model_config = ConfigDict(extra="allow")

    subject: str | None = None
    dnsNames: list[str] | None = None
    keyStrength: int | None = None
    trustChainPath: str | None = None
    issuedCertificatePath: str | None = None


class ResourceSpec(BaseModel):
    """One resource as written in the configuration file (every field optional)."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str | None = None
    name: str | None = None
    resourceGroup: str | None = None
    keyVault: str | None = None
    keyVaultSecretPrefix: str | None = None
    expirationDays: int | None = None
    expirationOverlapDays: int | None = None
    contentType: str | None = None
    decodeBase64: bool | None = None
    certificate: CertificateRequestSpec | None = Field(
        default=None,
        validation_alias=AliasChoices("certificateRequest", "certificate"),
    )


# ─── Defaulted model ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class CertificateRequest:
    """Policy for a CSR-issued certificate."""

    subject: str = ""
    dns_names: tuple[str, ...] = ()
    key_strength: int = 2048
    trust_chain_path: str = ""
    issued_certificate_path: str = ""


@dataclass(frozen=True)
class ManagedResource:
    """A resource after configuration and rotator defaults have been applied."""

    type: str
    name: str = ""
    resource_group: str = ""
    key_vault: str = ""
    key_vault_secret_prefix: str = ""
    expiration_days: int | None = None
    expiration_overlap_days: int = 0
    content_type: str = "text/plain"
    decode_base64: bool = False
    certificate: CertificateRequest | None = None

    def secret_name(self, configuration_id: str) -> str:
        """Name of the vault entry backing this resource."""
        return self.key_vault_secret_prefix + configuration_id


@dataclass(frozen=True)
class IdentifiedResource:
    """A configured resource paired with its configuration id."""

    id: str
    resource: ResourceSpec


@dataclass(frozen=True)
class ConfigurationFile:
    defaults: ResourceSpec = field(default_factory=ResourceSpec)
    resources: dict[str, ResourceSpec] = field(default_factory=dict)


# ─── Loading ─────────────────────────────────────────────────────────────


def _canonical_keys(raw: dict[str, Any]) -> dict[str, Any]:
    """Fold the certificate spellings onto one key so merging compares like with like."""
    canonical = {k: v for k, v in raw.items() if k not in CERTIFICATE_KEYS}
    for key in CERTIFICATE_KEYS:
        if key in raw:
            canonical["certificate"] = raw[key]
            break
    return canonical


def _read_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def parse_configuration(document: Any, *, source: str | None = None) -> ConfigurationFile:
    """Build a ConfigurationFile from an already-parsed JSON/YAML document."""
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ConfigurationError("configuration root must be a mapping", path=source)

    raw_defaults = document.get("defaults") or {}
    raw_resources = document.get("resources") or {}
    if not isinstance(raw_defaults, dict):
        raise ConfigurationError("'defaults' must be a mapping", path=source)
    if not isinstance(raw_resources, dict):
        raise ConfigurationError("'resources' must be a mapping", path=source)

    raw_defaults = _canonical_keys(raw_defaults)

    try:
        defaults = ResourceSpec.model_validate(raw_defaults)
        resources: dict[str, ResourceSpec] = {}
        for configuration_id, raw in raw_resources.items():
            if not isinstance(raw, dict):
                raise ConfigurationError(
                    f"resource '{configuration_id}' must be a mapping", path=source
                )
            # Shallow merge: keys set on the resource replace the default wholesale
            resources[str(configuration_id)] = ResourceSpec.model_validate(
                {**raw_defaults, **_canonical_keys(raw)}
            )
    except ValidationError as e:
        raise ConfigurationError(str(e), path=source) from e

    return ConfigurationFile(defaults=defaults, resources=resources)


def load_configuration(path: str | Path) -> ConfigurationFile:
    """Load and validate a JSON or YAML configuration file."""
    path = Path(path)
    try:
        document = _read_document(path)
    except OSError as e:
        raise ConfigurationError(f"cannot read configuration: {e}", path=str(path)) from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"cannot parse configuration: {e}", path=str(path)) from e

    configuration = parse_configuration(document, source=str(path))
    logger.debug(
        "Loaded %d resource(s) from %s", len(configuration.resources), path
    )
    return configuration


# ─── Filtering ───────────────────────────────────────────────────────────


def parse_resource_filter(value: str | None) -> list[str]:
    """Split a comma-separated resource filter ('a,b', '*', '') into ids."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def filter_resources(
    configuration: ConfigurationFile, target_resources: list[str]
) -> list[IdentifiedResource]:
    """Select target resources in configuration order.

    An empty target list or one containing '*' selects every resource.
    Targets missing from the configuration are logged and ignored.
    """
    if not target_resources or WILDCARD in target_resources:
        return [IdentifiedResource(k, v) for k, v in configuration.resources.items()]

    targets = set(target_resources)
    for missing in sorted(targets - configuration.resources.keys()):
        logger.warning("Resource '%s' was not found in the configuration file", missing)

    return [
        IdentifiedResource(k, v)
        for k, v in configuration.resources.items()
        if k in targets
    ]
