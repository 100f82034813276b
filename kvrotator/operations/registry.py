"""Operation registry: maps an operation name to its constructed operation."""

from __future__ import annotations

from kvrotator.config import RotationSettings
from kvrotator.operations.base import Operation
from kvrotator.operations.initialize import InitializeOperation
from kvrotator.operations.inspect import InspectOperation
from kvrotator.operations.manual_secret import ManualSecretOperation
from kvrotator.operations.nothing import NothingOperation
from kvrotator.operations.request_csr import RequestCsrOperation
from kvrotator.operations.rotate import RotateOperation
from kvrotator.rotators.registry import RotatorRegistry

BUILTIN_OPERATIONS: tuple[type[Operation], ...] = (
    NothingOperation,
    InitializeOperation,
    RotateOperation,
    RequestCsrOperation,
    InspectOperation,
    ManualSecretOperation,
)


class OperationRegistry:
    def __init__(self, operations: list[Operation] | None = None) -> None:
        self._operations: dict[str, Operation] = {}
        for operation in operations or []:
            self._operations[operation.name] = operation

    def resolve(self, name: str | None) -> Operation | None:
        return self._operations.get((name or "").strip().lower())

    def names(self) -> list[str]:
        return list(self._operations)

    @classmethod
    def default(
        cls, settings: RotationSettings, rotators: RotatorRegistry
    ) -> OperationRegistry:
        return cls([op(settings, rotators) for op in BUILTIN_OPERATIONS])
