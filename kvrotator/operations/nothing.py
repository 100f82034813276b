"""`nothing`: the default operation. Touches no resource."""

from __future__ import annotations

import logging

from kvrotator.operations.base import Operation, OperationReport
from kvrotator.resources import ConfigurationFile

logger = logging.getLogger(__name__)


class NothingOperation(Operation):
    name = "nothing"

    def run(
        self, configuration: ConfigurationFile, target_resources: list[str]
    ) -> OperationReport:
        logger.info("Nothing to do (%d resource(s) configured)", len(configuration.resources))
        return OperationReport(self.name)
