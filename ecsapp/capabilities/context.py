"""Shared state for one Pulumi run: config, lookups, resources handed between capabilities, exports."""

from dataclasses import dataclass, field
from typing import Any

import pulumi_aws

from ecsapp.config import StackConfig
from ecsapp.shared.lookups import SharedInfrastructure


@dataclass
class CapabilityContext:
    """Passed to foundation and every capability handler.

    Resources are stored under dotted keys ("vpc.id", "iam.task_role", ...).
    Each key is written once; a later capability reads it with require().
    """

    config: StackConfig
    infra: SharedInfrastructure
    aws_provider: pulumi_aws.Provider
    _outputs: dict[str, Any] = field(default_factory=dict)
    _exports: dict[str, Any] = field(default_factory=dict)

    def set(self, key: str, value: Any) -> None:
        """Publish a value for capabilities in later phases; keys are write-once."""
        if key in self._outputs:
            raise RuntimeError(f"context key already set: {key!r}")
        self._outputs[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._outputs.get(key, default)

    def require(self, key: str) -> Any:
        """Return a value published by an earlier phase.

        Raises:
            RuntimeError: key is missing; the message lists available keys.
        """
        if key not in self._outputs:
            available = ", ".join(sorted(self._outputs)) or "(none)"
            raise RuntimeError(f"missing required key: {key!r}. Available keys: {available}")
        return self._outputs[key]

    def export(self, key: str, value: Any) -> None:
        """Register a stack output."""
        self._exports[key] = value

    @property
    def exports(self) -> dict[str, Any]:
        """Copy of all registered stack outputs."""
        return dict(self._exports)
