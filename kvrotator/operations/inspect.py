"""`inspect`: report the state of every selected credential without changing it."""

from __future__ import annotations

import logging

from kvrotator.operations.base import OperationReport, ResourceOperation
from kvrotator.resources import ManagedResource
from kvrotator.rotators.base import Rotator

logger = logging.getLogger(__name__)


class InspectOperation(ResourceOperation):
    name = "inspect"

    def process(
        self,
        rotator: Rotator,
        configuration_id: str,
        resource: ManagedResource,
        report: OperationReport,
    ) -> None:
        result = rotator.inspect(configuration_id, resource)
        logger.debug("Inspected '%s': %s", configuration_id, result.to_dict())
        report.inspections.append(result)
