"""CloudWatch log group for container output (awslogs driver)."""

import pulumi
import pulumi_aws


def create_log_group(
    service_name: str,
    retention_days: int | None,
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.cloudwatch.LogGroup:
    """Create the log group containers write to. retention_days None keeps logs forever."""
    return pulumi_aws.cloudwatch.LogGroup(
        f"{service_name}_logs",
        name=f"/ecs/{service_name}",
        retention_in_days=retention_days,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
