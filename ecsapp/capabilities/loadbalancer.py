"""Load balancer capability: ALB, target group and listener for the service's container."""

from datetime import timedelta
from typing import Any

import pulumi

from ecsapp.capabilities.context import CapabilityContext
from ecsapp.capabilities.registry import Phase, register
from ecsapp.config import StackConfig
from ecsapp.errors import ConfigurationError
from ecsapp.loadbalancer.alb import create_listener, create_load_balancer
from ecsapp.loadbalancer.registration import (
    HealthCheckPolicy,
    Protocol,
    TargetBinding,
    TargetRegistration,
    register_target,
)
from ecsapp.loadbalancer.target_group import create_target_group


def registration_from_config(config: StackConfig) -> TargetRegistration:
    """Build and validate the target registration declared in spec.loadBalancer.

    Raises:
        ConfigurationError: loadBalancer is not declared, or a field is invalid.
    """
    lb = config.load_balancer
    if lb is None:
        raise ConfigurationError("loadBalancer", "section not declared")
    hc = lb.health_check
    binding = TargetBinding(
        container_name=lb.target_container_name,
        container_port=lb.target_container_port,
        protocol=Protocol(config.container.protocol),
    )
    policy = HealthCheckPolicy(
        path=hc.path,
        interval=timedelta(seconds=hc.interval),
        timeout=timedelta(seconds=hc.timeout),
        healthy_threshold=hc.healthy_threshold,
        unhealthy_threshold=hc.unhealthy_threshold,
    )
    registration = register_target(
        binding,
        policy,
        lb.listener.port,
        known_containers=[config.container.name],
    )
    # Bridge mode: the target port must be the container's mapped port
    if binding.container_port != config.container.port:
        raise ConfigurationError(
            "container_port",
            f"{binding.container_port} is not mapped by container {binding.container_name!r} "
            f"(port {config.container.port})",
        )
    return registration


@register("loadBalancer", phase=Phase.NETWORKING)
def loadbalancer_handler(
    section_config: dict[str, Any],
    ctx: CapabilityContext,
) -> None:
    """Provision ALB, target group and listener from the validated registration.

    Uses foundation outputs: loadBalancer.registration, vpc.id, vpc.public_subnet_ids,
    security_groups.alb. Section_config is ignored; config comes from ctx.config.
    """
    config = ctx.config
    aws_provider = ctx.aws_provider
    registration: TargetRegistration = ctx.require("loadBalancer.registration")
    internet_facing = config.load_balancer.internet_facing if config.load_balancer else True

    load_balancer = create_load_balancer(
        config.service_name,
        internet_facing,
        ctx.require("security_groups.alb"),
        ctx.require("vpc.public_subnet_ids" if internet_facing else "vpc.private_subnet_ids"),
        aws_provider,
    )
    target_group = create_target_group(
        config.service_name,
        registration,
        ctx.require("vpc.id"),
        aws_provider,
    )
    listener = create_listener(
        config.service_name,
        load_balancer,
        registration,
        target_group,
        aws_provider,
    )
    pulumi.log.info(
        f"Listener :{registration.listener_port} -> "
        f"{registration.binding.container_name}:{registration.binding.container_port} "
        f"(health check {registration.health_check.path})"
    )

    ctx.set("loadBalancer.alb", load_balancer)
    ctx.set("loadBalancer.target_group", target_group)
    ctx.set("loadBalancer.listener", listener)
    ctx.export("LoadBalancerDNS", load_balancer.dns_name)
