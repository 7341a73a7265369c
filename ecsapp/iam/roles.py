"""IAM roles for ECS container instances and tasks."""

import json

import pulumi
import pulumi_aws


def _assume_role_policy(service: str) -> str:
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Action": "sts:AssumeRole",
                    "Effect": "Allow",
                    "Principal": {"Service": service},
                }
            ],
        }
    )


def create_instance_role(
    service_name: str,
    aws_provider: pulumi_aws.Provider,
) -> tuple[pulumi_aws.iam.Role, pulumi_aws.iam.InstanceProfile]:
    """Create EC2 instance role (ECS agent + SSM) and its instance profile."""
    role = pulumi_aws.iam.Role(
        f"{service_name}_instance_role",
        name=f"{service_name}-ecs-instance",
        assume_role_policy=_assume_role_policy("ec2.amazonaws.com"),
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    pulumi_aws.iam.RolePolicyAttachment(
        f"{service_name}_instance_ecs",
        role=role.name,
        policy_arn="arn:aws:iam::aws:policy/service-role/AmazonEC2ContainerServiceforEC2Role",
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    pulumi_aws.iam.RolePolicyAttachment(
        f"{service_name}_instance_ssm",
        role=role.name,
        policy_arn="arn:aws:iam::aws:policy/AmazonSSMManagedInstanceCore",
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    profile = pulumi_aws.iam.InstanceProfile(
        f"{service_name}_instance_profile",
        name=f"{service_name}-ecs-instance",
        role=role.name,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    return role, profile


def create_task_roles(
    service_name: str,
    aws_provider: pulumi_aws.Provider,
) -> tuple[pulumi_aws.iam.Role, pulumi_aws.iam.Role]:
    """Create ECS task role and execution role (ECR pull + CloudWatch logs)."""
    assume_policy = _assume_role_policy("ecs-tasks.amazonaws.com")

    task_role = pulumi_aws.iam.Role(
        f"{service_name}_task_role",
        name=f"{service_name}-ecs-task",
        assume_role_policy=assume_policy,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )

    execution_role = pulumi_aws.iam.Role(
        f"{service_name}_exec_role",
        name=f"{service_name}-ecs-exec",
        assume_role_policy=assume_policy,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    pulumi_aws.iam.RolePolicyAttachment(
        f"{service_name}_exec_policy",
        role=execution_role.name,
        policy_arn="arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy",
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )

    return task_role, execution_role
