"""Target registration: bind a service container to an ALB target group with a health check.

The descriptor returned by register_target is what the target group, listener and
ECS service attachment are built from. All validation happens here, before any
resource is declared.
"""

from collections.abc import Collection
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from ecsapp.errors import ConfigurationError

MIN_PORT = 1
MAX_PORT = 65535


class Protocol(str, Enum):
    """Transport protocol of a target binding."""

    TCP = "tcp"
    UDP = "udp"


@dataclass(frozen=True)
class TargetBinding:
    """A routable backend: container name + port inside the service's task definition."""

    container_name: str
    container_port: int
    protocol: Protocol = Protocol.TCP


@dataclass(frozen=True)
class HealthCheckPolicy:
    """HTTP liveness probe for a target binding."""

    path: str
    interval: timedelta
    timeout: timedelta
    healthy_threshold: int
    unhealthy_threshold: int


@dataclass(frozen=True)
class TargetRegistration:
    """Validated registration: what the listener forwards to and how targets are probed."""

    listener_port: int
    binding: TargetBinding
    health_check: HealthCheckPolicy


def _check_port(field: str, port: int) -> None:
    if not MIN_PORT <= port <= MAX_PORT:
        raise ConfigurationError(field, f"port {port} outside [{MIN_PORT}, {MAX_PORT}]")


def _validate_binding(binding: TargetBinding, known_containers: Collection[str] | None) -> None:
    if not binding.container_name:
        raise ConfigurationError("container_name", "must be non-empty")
    if known_containers is not None and binding.container_name not in known_containers:
        known = ", ".join(sorted(known_containers)) or "(none)"
        raise ConfigurationError(
            "container_name",
            f"{binding.container_name!r} is not defined in the task definition. Known containers: {known}",
        )
    _check_port("container_port", binding.container_port)
    # ALB health checks are HTTP
    if binding.protocol is not Protocol.TCP:
        raise ConfigurationError("protocol", f"HTTP health checks require tcp, got {binding.protocol.value}")


def _validate_policy(policy: HealthCheckPolicy) -> None:
    if not policy.path.startswith("/"):
        raise ConfigurationError("path", f"must start with '/', got {policy.path!r}")
    if policy.timeout <= timedelta(0):
        raise ConfigurationError("timeout", "must be greater than zero")
    if policy.timeout >= policy.interval:
        raise ConfigurationError(
            "timeout",
            f"must be less than interval ({policy.timeout.total_seconds():g}s >= "
            f"{policy.interval.total_seconds():g}s)",
        )
    # Target group health checks are configured in whole seconds
    for field, duration in (("interval", policy.interval), ("timeout", policy.timeout)):
        if duration % timedelta(seconds=1):
            raise ConfigurationError(field, f"must be whole seconds, got {duration.total_seconds():g}s")
    if policy.healthy_threshold < 1:
        raise ConfigurationError("healthy_threshold", f"must be >= 1, got {policy.healthy_threshold}")
    if policy.unhealthy_threshold < 1:
        raise ConfigurationError("unhealthy_threshold", f"must be >= 1, got {policy.unhealthy_threshold}")


def register_target(
    binding: TargetBinding,
    policy: HealthCheckPolicy,
    listener_port: int,
    known_containers: Collection[str] | None = None,
) -> TargetRegistration:
    """Validate binding, policy and listener port; return the registration descriptor.

    Args:
        binding: Container name/port the load balancer routes to.
        policy: Health check applied to registered targets.
        listener_port: Port the ALB listener accepts traffic on.
        known_containers: Container names in the task definition. When given,
            binding.container_name must be one of them.

    Raises:
        ConfigurationError: On the first invalid field; ``field`` names it.
    """
    _validate_binding(binding, known_containers)
    _check_port("listener_port", listener_port)
    _validate_policy(policy)
    return TargetRegistration(
        listener_port=listener_port,
        binding=binding,
        health_check=policy,
    )
