"""VPC with one public and one private subnet per AZ, internet gateway and NAT."""

from dataclasses import dataclass
import ipaddress

import pulumi
import pulumi_aws

from ecsapp.config import MAX_SUBNET_PREFIX, NetworkConfig


@dataclass
class VpcResources:
    vpc: pulumi_aws.ec2.Vpc
    public_subnet_ids: list[pulumi.Output[str]]
    private_subnet_ids: list[pulumi.Output[str]]


def _subnet_cidrs(cidr: str, count: int) -> list[str]:
    """Split cidr into count equal blocks (rounded up to a power of two)."""
    network = ipaddress.ip_network(cidr)
    prefixlen_diff = (count - 1).bit_length()
    if network.prefixlen + prefixlen_diff > MAX_SUBNET_PREFIX:
        raise SystemExit(f"VPC CIDR {cidr} too small for {count} subnets")
    return [str(s) for s in network.subnets(prefixlen_diff=prefixlen_diff)][:count]


def create_vpc(
    service_name: str,
    network: NetworkConfig,
    availability_zones: list[str],
    aws_provider: pulumi_aws.Provider,
) -> VpcResources:
    """Create VPC, public/private subnets across availability_zones, IGW, NAT gateways, routes."""
    opts = pulumi.ResourceOptions(provider=aws_provider)
    vpc = pulumi_aws.ec2.Vpc(
        f"{service_name}_vpc",
        cidr_block=network.cidr,
        enable_dns_hostnames=True,
        enable_dns_support=True,
        tags={"Name": f"{service_name}-vpc"},
        opts=opts,
    )
    igw = pulumi_aws.ec2.InternetGateway(
        f"{service_name}_igw",
        vpc_id=vpc.id,
        opts=opts,
    )
    public_rt = pulumi_aws.ec2.RouteTable(
        f"{service_name}_public_rt",
        vpc_id=vpc.id,
        routes=[pulumi_aws.ec2.RouteTableRouteArgs(cidr_block="0.0.0.0/0", gateway_id=igw.id)],
        opts=opts,
    )

    azs = len(availability_zones)
    cidrs = _subnet_cidrs(network.cidr, 2 * azs)
    nat_count = azs if network.nat_gateways is None else min(network.nat_gateways, azs)

    public_subnets: list[pulumi_aws.ec2.Subnet] = []
    for i, az in enumerate(availability_zones):
        subnet = pulumi_aws.ec2.Subnet(
            f"{service_name}_public_{i}",
            vpc_id=vpc.id,
            cidr_block=cidrs[i],
            availability_zone=az,
            map_public_ip_on_launch=True,
            tags={"Name": f"{service_name}-public-{az}", "network": "public"},
            opts=opts,
        )
        pulumi_aws.ec2.RouteTableAssociation(
            f"{service_name}_public_{i}_rta",
            subnet_id=subnet.id,
            route_table_id=public_rt.id,
            opts=opts,
        )
        public_subnets.append(subnet)

    nat_gateways: list[pulumi_aws.ec2.NatGateway] = []
    for i in range(nat_count):
        eip = pulumi_aws.ec2.Eip(f"{service_name}_nat_eip_{i}", domain="vpc", opts=opts)
        nat_gateways.append(
            pulumi_aws.ec2.NatGateway(
                f"{service_name}_nat_{i}",
                allocation_id=eip.id,
                subnet_id=public_subnets[i].id,
                opts=pulumi.ResourceOptions(provider=aws_provider, depends_on=[igw]),
            )
        )

    private_subnets: list[pulumi_aws.ec2.Subnet] = []
    for i, az in enumerate(availability_zones):
        subnet = pulumi_aws.ec2.Subnet(
            f"{service_name}_private_{i}",
            vpc_id=vpc.id,
            cidr_block=cidrs[azs + i],
            availability_zone=az,
            tags={"Name": f"{service_name}-private-{az}", "network": "private"},
            opts=opts,
        )
        routes = []
        if nat_gateways:
            routes.append(
                pulumi_aws.ec2.RouteTableRouteArgs(
                    cidr_block="0.0.0.0/0",
                    nat_gateway_id=nat_gateways[i % len(nat_gateways)].id,
                )
            )
        rt = pulumi_aws.ec2.RouteTable(
            f"{service_name}_private_{i}_rt",
            vpc_id=vpc.id,
            routes=routes,
            opts=opts,
        )
        pulumi_aws.ec2.RouteTableAssociation(
            f"{service_name}_private_{i}_rta",
            subnet_id=subnet.id,
            route_table_id=rt.id,
            opts=opts,
        )
        private_subnets.append(subnet)

    return VpcResources(
        vpc=vpc,
        public_subnet_ids=[s.id for s in public_subnets],
        private_subnet_ids=[s.id for s in private_subnets],
    )
