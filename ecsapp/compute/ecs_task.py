"""ECS EC2 task definition and container definition builder.

Bridge networking: the container port is published on a fixed host port of the
container instance, which is what the target group registers.
"""

import json
from typing import Any

import pulumi
import pulumi_aws

from ecsapp.config import StackConfig


def _make_container_def(uri: str, log_group_name: str, config: StackConfig) -> str:
    """Build ECS container definition JSON string."""
    container = config.container
    env_vars = [{"name": k, "value": v} for k, v in sorted(container.environment.items())]
    container_spec: dict[str, Any] = {
        "name": container.name,
        "image": uri,
        "essential": True,
        "cpu": container.cpu,
        "memory": container.memory,
        "portMappings": [
            {
                "containerPort": container.port,
                "hostPort": container.host_port,
                "protocol": container.protocol,
            }
        ],
        "environment": env_vars,
        "logConfiguration": {
            "logDriver": "awslogs",
            "options": {
                "awslogs-region": config.region,
                "awslogs-group": log_group_name,
                "awslogs-stream-prefix": container.log_stream_prefix,
            },
        },
    }
    return json.dumps([container_spec])


def create_task_definition(
    config: StackConfig,
    image_uri: pulumi.Output[str],
    log_group: pulumi_aws.cloudwatch.LogGroup,
    task_role: pulumi_aws.iam.Role,
    exec_role: pulumi_aws.iam.Role,
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.ecs.TaskDefinition:
    """Create ECS EC2 task definition with a single container."""
    container_def = pulumi.Output.all(image_uri, log_group.name).apply(
        lambda args: _make_container_def(args[0], args[1], config)
    )
    return pulumi_aws.ecs.TaskDefinition(
        f"{config.service_name}_task",
        family=config.service_name,
        network_mode="bridge",
        requires_compatibilities=["EC2"],
        execution_role_arn=exec_role.arn,
        task_role_arn=task_role.arn,
        container_definitions=container_def,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
