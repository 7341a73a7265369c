"""Capacity capability: ECS cluster plus auto scaling group of container instances."""

from typing import Any

from ecsapp.capabilities.context import CapabilityContext
from ecsapp.capabilities.registry import Phase, register
from ecsapp.compute.capacity import create_capacity, create_ecs_cluster


@register("capacity", phase=Phase.INFRASTRUCTURE)
def capacity_handler(
    section_config: dict[str, Any],
    ctx: CapabilityContext,
) -> None:
    """Provision cluster and EC2 capacity in the private subnets.

    Uses foundation outputs: vpc.private_subnet_ids, security_groups.instances,
    iam.instance_profile. Sizing comes from ctx.config.capacity.
    """
    config = ctx.config
    cluster = create_ecs_cluster(config.service_name, ctx.aws_provider)
    asg = create_capacity(
        config.service_name,
        config.capacity,
        cluster,
        ctx.infra.ecs_ami_id,
        ctx.require("iam.instance_profile"),
        ctx.require("security_groups.instances"),
        ctx.require("vpc.private_subnet_ids"),
        ctx.aws_provider,
    )
    ctx.set("ecs.cluster", cluster)
    ctx.set("ecs.asg", asg)
    ctx.export("ecs_cluster_name", cluster.name)
    ctx.export("autoscaling_group_name", asg.name)
