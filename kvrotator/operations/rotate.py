"""`rotate`: replace every selected credential inside its rotation window."""

from __future__ import annotations

from kvrotator.operations.base import RotationOperation
from kvrotator.resources import ManagedResource
from kvrotator.results import RotationResult
from kvrotator.rotators.base import Rotator


class RotateOperation(RotationOperation):
    name = "rotate"

    def perform_single_run(
        self, rotator: Rotator, configuration_id: str, resource: ManagedResource
    ) -> RotationResult:
        return rotator.rotate(configuration_id, resource)
