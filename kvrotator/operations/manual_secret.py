"""
`manual-secret`: rotate a single manual secret with an operator-supplied value.

Unlike the other operations this one refuses to fan out: exactly one
non-wildcard target is required, and a bad target is fatal.
"""

from __future__ import annotations

from kvrotator.errors import OperationError
from kvrotator.operations.base import Operation, OperationReport, log_result
from kvrotator.resources import WILDCARD, ConfigurationFile
from kvrotator.rotators.manual_secret import ManualSecretRotator


class ManualSecretOperation(Operation):
    name = "manual-secret"

    def run(
        self, configuration: ConfigurationFile, target_resources: list[str]
    ) -> OperationReport:
        if len(target_resources) != 1 or target_resources[0] == WILDCARD:
            raise OperationError("Manual secret can only operate on a single resource at a time")

        configuration_id = target_resources[0]
        spec = configuration.resources.get(configuration_id)
        if spec is None:
            raise OperationError(
                f"Resource '{configuration_id}' was not found in the configuration file"
            )

        rotator = self.rotators.resolve(ManualSecretRotator.type)
        if rotator is None:
            raise OperationError(f"No rotator registered for '{ManualSecretRotator.type}'")

        result = rotator.rotate(configuration_id, rotator.apply_defaults(spec))
        log_result(result)

        report = OperationReport(self.name)
        report.record(result)
        return report
