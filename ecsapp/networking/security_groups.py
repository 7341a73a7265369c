"""Security groups for the load balancer and the ECS container instances."""

import pulumi
import pulumi_aws


def _egress_all() -> list[pulumi_aws.ec2.SecurityGroupEgressArgs]:
    return [
        pulumi_aws.ec2.SecurityGroupEgressArgs(
            protocol="-1",
            from_port=0,
            to_port=0,
            cidr_blocks=["0.0.0.0/0"],
        ),
    ]


def create_alb_security_group(
    service_name: str,
    vpc_id: pulumi.Input[str],
    listener_port: int,
    open_to_world: bool,
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.ec2.SecurityGroup:
    """Create security group for the ALB: listener port from anywhere when open, egress all."""
    ingress = []
    if open_to_world:
        ingress.append(
            pulumi_aws.ec2.SecurityGroupIngressArgs(
                protocol="tcp",
                from_port=listener_port,
                to_port=listener_port,
                cidr_blocks=["0.0.0.0/0"],
                description=f"Listener {listener_port} from anywhere",
            )
        )
    return pulumi_aws.ec2.SecurityGroup(
        f"{service_name}_alb_sg",
        name=f"{service_name}-alb",
        vpc_id=vpc_id,
        description=f"Load balancer for {service_name}",
        ingress=ingress,
        egress=_egress_all(),
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )


def create_instance_security_group(
    service_name: str,
    vpc_id: pulumi.Input[str],
    vpc_cidr: str,
    host_port: int,
    aws_provider: pulumi_aws.Provider,
    alb_sg_id: pulumi.Input[str] | None = None,
) -> pulumi_aws.ec2.SecurityGroup:
    """Create security group for container instances.

    Host port is reachable from the ALB security group when there is one,
    otherwise from the VPC CIDR.
    """
    if alb_sg_id is not None:
        rule = pulumi_aws.ec2.SecurityGroupIngressArgs(
            protocol="tcp",
            from_port=host_port,
            to_port=host_port,
            security_groups=[alb_sg_id],
            description="Host port from load balancer",
        )
    else:
        rule = pulumi_aws.ec2.SecurityGroupIngressArgs(
            protocol="tcp",
            from_port=host_port,
            to_port=host_port,
            cidr_blocks=[vpc_cidr],
            description="Host port from VPC",
        )
    return pulumi_aws.ec2.SecurityGroup(
        f"{service_name}_instance_sg",
        name=f"{service_name}-instances",
        vpc_id=vpc_id,
        description=f"ECS container instances for {service_name}",
        ingress=[rule],
        egress=_egress_all(),
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
