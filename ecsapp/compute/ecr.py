"""Container image source: configured image URI, or an ECR repository for the stack."""

import json

import pulumi
import pulumi_aws

KEEP_IMAGES = 5


def _lifecycle_policy(keep: int) -> str:
    """ECR lifecycle policy JSON that expires all but the newest keep images."""
    return json.dumps(
        {
            "rules": [
                {
                    "rulePriority": 1,
                    "description": f"Keep last {keep} images",
                    "selection": {
                        "tagStatus": "any",
                        "countType": "imageCountMoreThan",
                        "countNumber": keep,
                    },
                    "action": {"type": "expire"},
                }
            ],
        }
    )


def create_ecr_repository(
    service_name: str,
    aws_provider: pulumi_aws.Provider,
) -> pulumi_aws.ecr.Repository:
    """Create ECR repository with lifecycle policy; images are pushed outside Pulumi."""
    repo = pulumi_aws.ecr.Repository(
        f"{service_name}_ecr",
        name=service_name,
        image_tag_mutability="MUTABLE",
        image_scanning_configuration=pulumi_aws.ecr.RepositoryImageScanningConfigurationArgs(
            scan_on_push=True,
        ),
        force_delete=True,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    pulumi_aws.ecr.LifecyclePolicy(
        f"{service_name}_ecr_lifecycle",
        repository=repo.name,
        policy=_lifecycle_policy(KEEP_IMAGES),
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    return repo


def resolve_image(
    service_name: str,
    image: str,
    aws_provider: pulumi_aws.Provider,
) -> tuple[pulumi.Output[str], pulumi_aws.ecr.Repository | None]:
    """Return (image URI, repository). Repository is None when image is configured."""
    if image:
        return pulumi.Output.from_input(image), None
    repo = create_ecr_repository(service_name, aws_provider)
    return pulumi.Output.concat(repo.repository_url, ":latest"), repo
