"""ECS cluster with EC2 capacity: launch template + auto scaling group.

Instances run the ECS-optimized AMI and join the cluster through user data.
"""

import base64

import pulumi
import pulumi_aws

from ecsapp.config import CapacityConfig


def _user_data(cluster_name: str) -> str:
    """Base64 user data that registers the instance with cluster_name."""
    script = "\n".join(
        [
            "#!/bin/bash",
            f"echo ECS_CLUSTER={cluster_name} >> /etc/ecs/ecs.config",
            "echo ECS_ENABLE_CONTAINER_METADATA=true >> /etc/ecs/ecs.config",
        ]
    )
    return base64.b64encode(f"{script}\n".encode()).decode()


def create_ecs_cluster(
    service_name: str,
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.ecs.Cluster:
    """Create ECS cluster; container insights off."""
    return pulumi_aws.ecs.Cluster(
        f"{service_name}_cluster",
        name=service_name,
        settings=[pulumi_aws.ecs.ClusterSettingArgs(name="containerInsights", value="disabled")],
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )


def create_capacity(
    service_name: str,
    capacity: CapacityConfig,
    cluster: pulumi_aws.ecs.Cluster,
    ami_id: str,
    instance_profile: pulumi_aws.iam.InstanceProfile,
    security_group: pulumi_aws.ec2.SecurityGroup,
    subnet_ids: list[pulumi.Output[str]],
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.autoscaling.Group:
    """Create launch template and auto scaling group of container instances for cluster."""
    launch_template = pulumi_aws.ec2.LaunchTemplate(
        f"{service_name}_lt",
        name_prefix=f"{service_name}-",
        image_id=ami_id,
        instance_type=capacity.instance_type,
        iam_instance_profile=pulumi_aws.ec2.LaunchTemplateIamInstanceProfileArgs(
            arn=instance_profile.arn,
        ),
        vpc_security_group_ids=[security_group.id],
        user_data=cluster.name.apply(_user_data),
        metadata_options=pulumi_aws.ec2.LaunchTemplateMetadataOptionsArgs(
            http_tokens="required",
            http_endpoint="enabled",
        ),
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    return pulumi_aws.autoscaling.Group(
        f"{service_name}_asg",
        name_prefix=f"{service_name}-",
        desired_capacity=capacity.desired_capacity,
        min_size=capacity.min_capacity,
        max_size=capacity.max_capacity,
        vpc_zone_identifiers=subnet_ids,
        launch_template=pulumi_aws.autoscaling.GroupLaunchTemplateArgs(
            id=launch_template.id,
            version="$Latest",
        ),
        tags=[
            pulumi_aws.autoscaling.GroupTagArgs(
                key="Name",
                value=f"{service_name}-ecs-instance",
                propagate_at_launch=True,
            ),
        ],
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
