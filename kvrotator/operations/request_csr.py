"""
`request-csr`: initialize and collect the CSRs handed back.

Each non-empty CSR from a processed resource is kept in
`report.artifacts` keyed by configuration id, for the CLI to write out.
"""

from __future__ import annotations

import logging

from kvrotator.operations.base import OperationReport
from kvrotator.operations.initialize import InitializeOperation
from kvrotator.resources import ManagedResource
from kvrotator.results import CsrContext
from kvrotator.rotators.base import Rotator

logger = logging.getLogger(__name__)


class RequestCsrOperation(InitializeOperation):
    name = "request-csr"

    def process(
        self,
        rotator: Rotator,
        configuration_id: str,
        resource: ManagedResource,
        report: OperationReport,
    ) -> None:
        super().process(rotator, configuration_id, resource, report)
        result = report.results[-1]
        if result.rotated and isinstance(result.context, CsrContext) and result.context.csr:
            logger.debug("Collected CSR for '%s'", configuration_id)
            report.artifacts[configuration_id] = result.context.csr
