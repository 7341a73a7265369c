"""Application load balancer and its forwarding listener."""

import pulumi
import pulumi_aws

from ecsapp.loadbalancer.registration import TargetRegistration


def create_load_balancer(
    service_name: str,
    internet_facing: bool,
    security_group: pulumi_aws.ec2.SecurityGroup,
    subnet_ids: list[pulumi.Output[str]],
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.lb.LoadBalancer:
    """Create ALB in subnet_ids (public subnets when internet facing)."""
    return pulumi_aws.lb.LoadBalancer(
        f"{service_name}_alb",
        name=f"{service_name}-alb"[:32],
        load_balancer_type="application",
        internal=not internet_facing,
        security_groups=[security_group.id],
        subnets=subnet_ids,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )


def create_listener(
    service_name: str,
    load_balancer: pulumi_aws.lb.LoadBalancer,
    registration: TargetRegistration,
    target_group: pulumi_aws.lb.TargetGroup,
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.lb.Listener:
    """Create HTTP listener on the registration's listener port, forwarding to target_group."""
    return pulumi_aws.lb.Listener(
        f"{service_name}_listener",
        load_balancer_arn=load_balancer.arn,
        port=registration.listener_port,
        protocol="HTTP",
        default_actions=[
            pulumi_aws.lb.ListenerDefaultActionArgs(
                type="forward",
                target_group_arn=target_group.arn,
            )
        ],
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
