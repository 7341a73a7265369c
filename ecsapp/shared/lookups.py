"""Lookup account/region data the stack builds on (availability zones, ECS AMI)."""

from dataclasses import dataclass

import pulumi
import pulumi_aws

ECS_AMI_PARAMETER = "/aws/service/ecs/optimized-ami/amazon-linux-2/recommended/image_id"


@dataclass
class SharedInfrastructure:
    """Region-level values used by all capabilities."""

    availability_zones: list[str]
    ecs_ami_id: str


def lookup_shared_infrastructure(
    max_azs: int,
    aws_provider: pulumi_aws.Provider,
) -> SharedInfrastructure:
    """Lookup availability zones (first max_azs) and the ECS-optimized AMI.

    Does not create any resources.
    """
    zones = pulumi_aws.get_availability_zones(
        state="available",
        opts=pulumi.InvokeOptions(provider=aws_provider),
    )
    if not zones.names:
        raise SystemExit("No available availability zones in region")

    ami_param = pulumi_aws.ssm.get_parameter(
        name=ECS_AMI_PARAMETER,
        opts=pulumi.InvokeOptions(provider=aws_provider),
    )
    if not ami_param.value:
        raise SystemExit(f"ECS-optimized AMI not found ({ECS_AMI_PARAMETER})")

    return SharedInfrastructure(
        availability_zones=list(zones.names)[:max_azs],
        ecs_ami_id=ami_param.value,
    )
