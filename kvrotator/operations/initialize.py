"""`initialize`: create every selected credential that does not exist yet."""

from __future__ import annotations

from kvrotator.operations.base import RotationOperation
from kvrotator.resources import ManagedResource
from kvrotator.results import RotationResult
from kvrotator.rotators.base import Rotator


class InitializeOperation(RotationOperation):
    name = "initialize"

    def perform_single_run(
        self, rotator: Rotator, configuration_id: str, resource: ManagedResource
    ) -> RotationResult:
        return rotator.initialize(configuration_id, resource)
