"""ALB target group built from a validated target registration."""

import pulumi
import pulumi_aws

from ecsapp.loadbalancer.registration import HealthCheckPolicy, TargetRegistration


def health_check_args(policy: HealthCheckPolicy) -> pulumi_aws.lb.TargetGroupHealthCheckArgs:
    """Translate a health check policy to target group health check args (whole seconds)."""
    return pulumi_aws.lb.TargetGroupHealthCheckArgs(
        enabled=True,
        path=policy.path,
        protocol="HTTP",
        port="traffic-port",
        interval=int(policy.interval.total_seconds()),
        timeout=int(policy.timeout.total_seconds()),
        healthy_threshold=policy.healthy_threshold,
        unhealthy_threshold=policy.unhealthy_threshold,
    )


def create_target_group(
    service_name: str,
    registration: TargetRegistration,
    vpc_id: pulumi.Input[str],
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.lb.TargetGroup:
    """Create instance target group on the binding's port with the registration's health check."""
    return pulumi_aws.lb.TargetGroup(
        f"{service_name}_tg",
        name=f"{service_name}-tg"[:32],
        port=registration.binding.container_port,
        protocol="HTTP",
        vpc_id=vpc_id,
        target_type="instance",
        health_check=health_check_args(registration.health_check),
        deregistration_delay=60,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
