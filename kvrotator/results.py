"""
Result models returned by rotators and collected by operations.

`RotationResult.context` is one of a closed set of context dataclasses,
each tagged with a `kind`, so callers can match on the variant instead of
poking at an untyped payload:

    match result.context:
        case CsrContext(csr=csr):
            ...
        case MergeContext(thumbprint=thumbprint):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value else ""


@dataclass(frozen=True)
class EmptyContext:
    kind: ClassVar[str] = "empty"

    def to_dict(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class SecretContext:
    """Names the vault entry a policy decision was made about."""

    kind: ClassVar[str] = "secret"
    secret_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"secretName": self.secret_name}


@dataclass(frozen=True)
class ScheduleContext:
    """Reported when a credential exists but is outside its rotation window."""

    kind: ClassVar[str] = "schedule"
    expiration: datetime | None
    expiration_overlap_days: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "expiration": _iso(self.expiration),
            "expirationOverlapDays": self.expiration_overlap_days,
        }


@dataclass(frozen=True)
class WriteContext:
    """Outcome of a secret or certificate write (or what-if of one)."""

    kind: ClassVar[str] = "write"
    id: str = ""
    expiration: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "expiration": _iso(self.expiration)}


@dataclass(frozen=True)
class CsrContext:
    """PEM-wrapped certificate signing request, empty when none was issued."""

    kind: ClassVar[str] = "csr"
    csr: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"csr": self.csr}


@dataclass(frozen=True)
class MergeContext:
    """Thumbprint of the certificate produced by merging a signed CSR."""

    kind: ClassVar[str] = "merge"
    thumbprint: str

    def to_dict(self) -> dict[str, Any]:
        return {"thumbprint": self.thumbprint}


@dataclass(frozen=True)
class ErrorContext:
    """A failure converted into a result at the rotator boundary."""

    kind: ClassVar[str] = "error"
    message: str
    error: str = ""

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorContext:
        return cls(message=str(exc), error=f"{type(exc).__name__}: {exc}")

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "error": self.error}


RotationContext = (
    EmptyContext
    | SecretContext
    | ScheduleContext
    | WriteContext
    | CsrContext
    | MergeContext
    | ErrorContext
)


@dataclass(frozen=True)
class RotationResult:
    """Outcome of a single initialize or rotate call."""

    name: str
    rotated: bool
    notes: str = ""
    context: RotationContext = field(default_factory=EmptyContext)

    @classmethod
    def failed(cls, name: str, exc: BaseException) -> RotationResult:
        return cls(name, False, str(exc), ErrorContext.from_exception(exc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "rotated": self.rotated,
            "notes": self.notes,
            "context": {"kind": self.context.kind, **self.context.to_dict()},
        }


INSPECTION_COLUMNS = [
    "name",
    "type",
    "secretId",
    "resourceId",
    "expiresOn",
    "updatedOn",
    "notes",
]


@dataclass(frozen=True)
class InspectionResult:
    """Read-only status of one managed resource."""

    name: str
    type: str
    secret_id: str
    notes: str
    resource_id: str = ""
    updated_on: datetime | None = None
    expires_on: datetime | None = None

    def to_dict(self) -> dict[str, str]:
        """Flat record keyed by INSPECTION_COLUMNS."""
        return {
            "name": self.name,
            "type": self.type,
            "secretId": self.secret_id,
            "resourceId": self.resource_id,
            "expiresOn": _iso(self.expires_on),
            "updatedOn": _iso(self.updated_on),
            "notes": self.notes,
        }

    def to_row(self) -> list[str]:
        record = self.to_dict()
        return [record[c] for c in INSPECTION_COLUMNS]
