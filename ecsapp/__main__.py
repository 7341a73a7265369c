"""
ecsapp Pulumi program: provisions one containerized service from stack.yaml.
Creates a VPC, an ECS cluster on EC2 capacity, the service's task definition and
service, and an application load balancer whose target group health-checks it.
Exports the load balancer DNS name as LoadBalancerDNS.
"""

import pulumi

from ecsapp.capabilities import provision_foundation, run_capabilities
from ecsapp.capabilities.context import CapabilityContext
from ecsapp.capabilities.loadbalancer import registration_from_config
from ecsapp.config import create_aws_provider, load_stack_config
from ecsapp.errors import ConfigurationError
from ecsapp.shared.lookups import lookup_shared_infrastructure


def main() -> None:
    # Everything validated here runs before the provider or any lookup reaches AWS
    try:
        config = load_stack_config()
        registration = registration_from_config(config) if config.load_balancer is not None else None
    except ConfigurationError as e:
        raise SystemExit(f"Invalid stack.yaml: {e}") from e

    aws_provider = create_aws_provider(config.service_name, config.region)
    infra = lookup_shared_infrastructure(config.network.max_azs, aws_provider)
    ctx = CapabilityContext(config=config, infra=infra, aws_provider=aws_provider)
    if registration is not None:
        ctx.set("loadBalancer.registration", registration)
    sections = config.spec_sections
    pulumi.log.info(f"Stack '{config.service_name}' sections: {', '.join(sorted(sections))}")

    try:
        provision_foundation(sections, ctx)
        run_capabilities(sections, ctx)
    except ConfigurationError as e:
        raise SystemExit(f"Invalid stack.yaml: {e}") from e

    for key, value in ctx.exports.items():
        pulumi.export(key, value)


main()
