"""Foundation provisioning: VPC, security groups and IAM roles."""

from ecsapp.capabilities.context import CapabilityContext


def provision_foundation(spec_sections: dict, ctx: CapabilityContext) -> None:
    """Create shared network, security groups and IAM roles based on declared spec sections.

    Imports resource modules inside the function to avoid circular imports.
    """
    declared = set(spec_sections.keys())
    config = ctx.config
    service_name = config.service_name
    aws_provider = ctx.aws_provider

    from ecsapp.networking.vpc import create_vpc

    network = create_vpc(service_name, config.network, ctx.infra.availability_zones, aws_provider)
    ctx.set("vpc", network.vpc)
    ctx.set("vpc.id", network.vpc.id)
    ctx.set("vpc.public_subnet_ids", network.public_subnet_ids)
    ctx.set("vpc.private_subnet_ids", network.private_subnet_ids)

    from ecsapp.networking.security_groups import (
        create_alb_security_group,
        create_instance_security_group,
    )

    alb_sg_id = None
    if "loadBalancer" in declared and config.load_balancer is not None:
        alb_sg = create_alb_security_group(
            service_name,
            network.vpc.id,
            config.load_balancer.listener.port,
            config.load_balancer.listener.open,
            aws_provider,
        )
        alb_sg_id = alb_sg.id
        ctx.set("security_groups.alb", alb_sg)

    instance_sg = create_instance_security_group(
        service_name,
        network.vpc.id,
        config.network.cidr,
        config.container.host_port,
        aws_provider,
        alb_sg_id=alb_sg_id,
    )
    ctx.set("security_groups.instances", instance_sg)

    from ecsapp.iam.roles import create_instance_role, create_task_roles

    if "capacity" in declared:
        _, instance_profile = create_instance_role(service_name, aws_provider)
        ctx.set("iam.instance_profile", instance_profile)

    if "service" in declared:
        task_role, exec_role = create_task_roles(service_name, aws_provider)
        ctx.set("iam.task_role", task_role)
        ctx.set("iam.exec_role", exec_role)
