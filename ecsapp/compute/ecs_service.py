"""ECS service on EC2 capacity, optionally attached to an ALB target group."""

import pulumi
import pulumi_aws

from ecsapp.config import StackConfig
from ecsapp.loadbalancer.registration import TargetRegistration


def _sanitize_ecs_service_name(service_name: str) -> str:
    """ECS service name: letters, digits, hyphens and underscores only."""
    return service_name.replace(".", "_").replace("/", "_")[:255]


def create_ecs_service(
    config: StackConfig,
    cluster: pulumi_aws.ecs.Cluster,
    task_def: pulumi_aws.ecs.TaskDefinition,
    aws_provider: pulumi_aws.Provider,
    registration: TargetRegistration | None = None,
    target_group: pulumi_aws.lb.TargetGroup | None = None,
    depends_on: list[pulumi.Resource] | None = None,
) -> pulumi_aws.ecs.Service:
    """Create ECS EC2 service.

    When registration and target_group are given, tasks are registered under the
    binding's container name and port. depends_on should include the listener so
    the target group is attached to a load balancer before the service uses it.
    """
    load_balancers = []
    if registration is not None and target_group is not None:
        load_balancers.append(
            pulumi_aws.ecs.ServiceLoadBalancerArgs(
                target_group_arn=target_group.arn,
                container_name=registration.binding.container_name,
                container_port=registration.binding.container_port,
            )
        )
    return pulumi_aws.ecs.Service(
        f"{config.service_name}_svc",
        name=_sanitize_ecs_service_name(config.service_name),
        cluster=cluster.arn,
        task_definition=task_def.arn,
        desired_count=config.service.desired_count,
        launch_type="EC2",
        load_balancers=load_balancers,
        deployment_circuit_breaker=pulumi_aws.ecs.ServiceDeploymentCircuitBreakerArgs(
            enable=True,
            rollback=True,
        ),
        opts=pulumi.ResourceOptions(
            provider=aws_provider,
            depends_on=depends_on or [],
        ),
    )
