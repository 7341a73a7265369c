"""Service capability: image source, log group, task definition and ECS service."""

from typing import Any

import pulumi

from ecsapp.capabilities.context import CapabilityContext
from ecsapp.capabilities.registry import Phase, register
from ecsapp.compute.ecr import resolve_image
from ecsapp.compute.ecs_service import create_ecs_service
from ecsapp.compute.ecs_task import create_task_definition
from ecsapp.compute.logs import create_log_group


@register("service", phase=Phase.COMPUTE, requires=["capacity"])
def service_handler(
    section_config: dict[str, Any],
    ctx: CapabilityContext,
) -> None:
    """Provision the containerized service on the cluster.

    Uses outputs: ecs.cluster, iam.task_role, iam.exec_role and, when the load
    balancer ran, loadBalancer.registration / target_group / listener.
    Section_config is ignored; config comes from ctx.config.
    """
    config = ctx.config
    aws_provider = ctx.aws_provider

    cluster = ctx.require("ecs.cluster")
    task_role = ctx.require("iam.task_role")
    exec_role = ctx.require("iam.exec_role")

    image_uri, repo = resolve_image(config.service_name, config.container.image, aws_provider)
    if repo is None:
        pulumi.log.info(f"Using configured image {config.container.image}")
    else:
        pulumi.log.info("No image configured; tasks pull ':latest' from the stack's ECR repository")
        ctx.export("ecr_repository_uri", repo.repository_url)

    log_group = create_log_group(
        config.service_name,
        config.container.log_retention_days,
        aws_provider,
    )
    task_def = create_task_definition(
        config,
        image_uri,
        log_group,
        task_role,
        exec_role,
        aws_provider,
    )

    registration = ctx.get("loadBalancer.registration")
    target_group = ctx.get("loadBalancer.target_group")
    listener = ctx.get("loadBalancer.listener")
    if registration is None:
        pulumi.log.warn("No loadBalancer declared; service will not receive external traffic")

    ecs_service = create_ecs_service(
        config=config,
        cluster=cluster,
        task_def=task_def,
        aws_provider=aws_provider,
        registration=registration,
        target_group=target_group,
        depends_on=[listener] if listener is not None else None,
    )

    ctx.set("ecs.service", ecs_service)
    ctx.export("ecs_service_name", ecs_service.name)
    ctx.export("log_group_name", log_group.name)
