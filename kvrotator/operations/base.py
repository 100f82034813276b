"""
Operation contract and the shared per-resource iteration.

An operation is what one kvrotator run does (`initialize`, `rotate`,
`inspect`, ...). `ResourceOperation` owns the loop every resource-driven
operation shares: filter targets, resolve the rotator for each resource
type, apply defaults, run one lifecycle step, and record the outcome in an
`OperationReport`. A failure on one resource never stops the others.

Usage:
    class TouchOperation(RotationOperation):
        name = "touch"

        def perform_single_run(self, rotator, configuration_id, resource):
            return rotator.rotate(configuration_id, resource)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from kvrotator.config import RotationSettings
from kvrotator.resources import ConfigurationFile, ManagedResource, filter_resources
from kvrotator.results import (
    INSPECTION_COLUMNS,
    ErrorContext,
    InspectionResult,
    RotationResult,
)
from kvrotator.rotators.base import Rotator
from kvrotator.rotators.registry import RotatorRegistry

logger = logging.getLogger(__name__)


@dataclass
class OperationReport:
    """Everything one operation produced, in resource order."""

    operation: str
    results: list[RotationResult] = field(default_factory=list)
    inspections: list[InspectionResult] = field(default_factory=list)
    rotated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    artifacts: dict[str, str] = field(default_factory=dict)

    def record(self, result: RotationResult) -> None:
        self.results.append(result)
        if result.rotated:
            self.rotated.append(result.name)

    def inspection_rows(self) -> list[list[str]]:
        """Inspection table, header row first."""
        return [list(INSPECTION_COLUMNS), *(i.to_row() for i in self.inspections)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "results": [r.to_dict() for r in self.results],
            "inspections": [i.to_dict() for i in self.inspections],
            "rotated": list(self.rotated),
            "skipped": list(self.skipped),
            "errors": list(self.errors),
            "artifacts": dict(self.artifacts),
        }


class Operation(ABC):
    """One kvrotator run mode.

    Attributes:
        name: Operation name as given on the command line (e.g. "rotate")
    """

    name: str

    def __init__(self, settings: RotationSettings, rotators: RotatorRegistry) -> None:
        self.settings = settings
        self.rotators = rotators

    @abstractmethod
    def run(
        self, configuration: ConfigurationFile, target_resources: list[str]
    ) -> OperationReport:
        """Run against the selected resources of `configuration`."""


class ResourceOperation(Operation):
    """Iterates the target resources and hands each to `process`."""

    def run(
        self, configuration: ConfigurationFile, target_resources: list[str]
    ) -> OperationReport:
        report = OperationReport(self.name)

        for entry in filter_resources(configuration, target_resources):
            rotator = self.rotators.resolve(entry.resource.type)
            if rotator is None:
                logger.warning(
                    "Resource '%s' of type '%s' is not a supported resource type",
                    entry.id,
                    entry.resource.type or "",
                )
                report.skipped.append(entry.id)
                continue

            try:
                self.process(rotator, entry.id, rotator.apply_defaults(entry.resource), report)
            except Exception as e:
                logger.error("Resource '%s' encountered an error: '%s'", entry.id, e)
                logger.debug("Traceback for '%s'", entry.id, exc_info=True)
                report.errors.append(entry.id)

        return report

    @abstractmethod
    def process(
        self,
        rotator: Rotator,
        configuration_id: str,
        resource: ManagedResource,
        report: OperationReport,
    ) -> None:
        """Handle one resource and record the outcome in `report`."""


class RotationOperation(ResourceOperation):
    """A resource operation whose step yields a `RotationResult`."""

    def process(
        self,
        rotator: Rotator,
        configuration_id: str,
        resource: ManagedResource,
        report: OperationReport,
    ) -> None:
        result = self.perform_single_run(rotator, configuration_id, resource)
        log_result(result)
        report.record(result)

    @abstractmethod
    def perform_single_run(
        self, rotator: Rotator, configuration_id: str, resource: ManagedResource
    ) -> RotationResult:
        """Run the lifecycle step for one resource."""


def log_result(result: RotationResult) -> None:
    if result.rotated:
        logger.info("Resource '%s' was processed", result.name)
    elif isinstance(result.context, ErrorContext):
        logger.error("Resource '%s' encountered an error: '%s'", result.name, result.notes)
    else:
        logger.warning("Resource '%s' was not processed: %s", result.name, result.notes)
