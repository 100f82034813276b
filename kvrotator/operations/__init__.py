"""
Operations: what a kvrotator run does with the configured resources.

    nothing        no-op (default)
    initialize     create credentials that do not exist yet
    rotate         replace credentials inside their rotation window
    request-csr    initialize and collect CSRs for external signing
    inspect        report credential state without changing it
    manual-secret  rotate one manual secret with a supplied value
"""

from __future__ import annotations

from kvrotator.operations.base import (
    Operation,
    OperationReport,
    ResourceOperation,
    RotationOperation,
)
from kvrotator.operations.initialize import InitializeOperation
from kvrotator.operations.inspect import InspectOperation
from kvrotator.operations.manual_secret import ManualSecretOperation
from kvrotator.operations.nothing import NothingOperation
from kvrotator.operations.registry import OperationRegistry
from kvrotator.operations.request_csr import RequestCsrOperation
from kvrotator.operations.rotate import RotateOperation

__all__ = [
    "InitializeOperation",
    "InspectOperation",
    "ManualSecretOperation",
    "NothingOperation",
    "Operation",
    "OperationRegistry",
    "OperationReport",
    "RequestCsrOperation",
    "ResourceOperation",
    "RotateOperation",
    "RotationOperation",
]
