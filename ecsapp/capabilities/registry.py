"""Capability registry: phase ordering, handler registration and execution."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Protocol

import pulumi

from ecsapp.capabilities.context import CapabilityContext
from ecsapp.errors import ConfigurationError


class Phase(IntEnum):
    """Execution phase order for capabilities (lower runs first)."""

    FOUNDATION = 0
    INFRASTRUCTURE = 1
    NETWORKING = 2
    COMPUTE = 3


class CapabilityHandler(Protocol):
    """Protocol for capability handler functions."""

    def __call__(self, section_config: dict[str, Any], ctx: CapabilityContext) -> None:
        ...


@dataclass
class CapabilityDef:
    """Registered capability: handler, phase, and optional dependencies."""

    handler: Callable[[dict[str, Any], CapabilityContext], None]
    phase: Phase
    requires: list[str]


CAPABILITIES: dict[str, CapabilityDef] = {}


def register(
    name: str,
    phase: Phase,
    requires: list[str] | None = None,
) -> Callable[[CapabilityHandler], CapabilityHandler]:
    """Decorator to register a capability handler in CAPABILITIES."""

    def decorator(fn: CapabilityHandler) -> CapabilityHandler:
        CAPABILITIES[name] = CapabilityDef(
            handler=fn,
            phase=phase,
            requires=requires or [],
        )
        return fn

    return decorator


def execution_order(spec_sections: dict[str, Any]) -> list[str]:
    """Names of registered capabilities declared in spec_sections, by phase.

    Ties keep registration order.

    Raises:
        ConfigurationError: A declared capability requires an undeclared section.
    """
    declared = [name for name in CAPABILITIES if name in spec_sections]
    for name in declared:
        missing = [r for r in CAPABILITIES[name].requires if r not in spec_sections]
        if missing:
            raise ConfigurationError(name, f"requires section(s): {', '.join(missing)}")
    return sorted(declared, key=lambda n: CAPABILITIES[n].phase)


def run_capabilities(spec_sections: dict[str, Any], ctx: CapabilityContext) -> None:
    """Run every declared capability handler in phase order."""
    unknown = sorted(set(spec_sections) - set(CAPABILITIES))
    if unknown:
        pulumi.log.warn(f"No capability registered for section(s): {', '.join(unknown)}")
    for name in execution_order(spec_sections):
        pulumi.log.info(f"Provisioning capability '{name}'")
        CAPABILITIES[name].handler(spec_sections[name], ctx)
