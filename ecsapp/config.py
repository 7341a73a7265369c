"""Stack.yaml configuration loading and validation."""

from dataclasses import dataclass, field
import ipaddress
import os
from pathlib import Path
from typing import Any

import jsonschema
import pulumi
import pulumi_aws
import yaml

from ecsapp.errors import ConfigurationError
from ecsapp.spec.validator import error_path, validate_stack_spec

# Smallest subnet AWS allows in a VPC
MAX_SUBNET_PREFIX = 28


@dataclass
class NetworkConfig:
    max_azs: int = 2
    cidr: str = "10.0.0.0/16"
    nat_gateways: int | None = None  # None = one per AZ


@dataclass
class CapacityConfig:
    instance_type: str = "t2.micro"
    desired_capacity: int = 2
    min_capacity: int = 1
    max_capacity: int = 2


@dataclass
class ContainerConfig:
    name: str = "MyContainer"
    image: str = ""  # Empty: ECR repository created for the stack, tag latest
    port: int = 80
    host_port: int = 80
    protocol: str = "tcp"
    cpu: int = 256
    memory: int = 512
    log_stream_prefix: str = "MyApp"
    log_retention_days: int | None = None
    environment: dict[str, str] = field(default_factory=dict)


@dataclass
class ServiceConfig:
    desired_count: int = 1


@dataclass
class ListenerConfig:
    port: int = 80
    open: bool = True


@dataclass
class HealthCheckConfig:
    path: str = "/"
    interval: int = 60
    timeout: int = 5
    healthy_threshold: int = 2
    unhealthy_threshold: int = 5


@dataclass
class LoadBalancerConfig:
    internet_facing: bool = True
    listener: ListenerConfig = field(default_factory=ListenerConfig)
    target_container_name: str = "MyContainer"
    target_container_port: int = 80
    health_check: HealthCheckConfig = field(default_factory=HealthCheckConfig)


@dataclass
class StackConfig:
    """Parsed and validated stack.yaml configuration."""

    service_name: str
    region: str
    raw_spec: dict[str, Any]
    network: NetworkConfig = field(default_factory=NetworkConfig)
    capacity: CapacityConfig = field(default_factory=CapacityConfig)
    container: ContainerConfig = field(default_factory=ContainerConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    load_balancer: LoadBalancerConfig | None = None

    @property
    def spec_sections(self) -> dict[str, Any]:
        """Return capability section names and their raw config (for registry).

        capacity and service always run; loadBalancer only when declared.
        """
        sections: dict[str, Any] = {
            "capacity": self.raw_spec.get("capacity") or {},
            "service": self.raw_spec.get("service") or {},
        }
        if self.load_balancer is not None:
            sections["loadBalancer"] = self.raw_spec.get("loadBalancer") or {}
        return sections

    @classmethod
    def from_file(cls, path: str) -> "StackConfig":
        """Load and validate stack.yaml from file path.

        Raises:
            SystemExit: If the file does not exist.
            ConfigurationError: If the document fails schema validation.
        """
        if not Path(path).exists():
            raise SystemExit(f"stack.yaml not found: {path}")

        with open(path, encoding="utf-8") as f:
            document: dict[str, Any] = yaml.safe_load(f)

        try:
            validate_stack_spec(document)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(error_path(e), e.message) from e
        except ValueError as e:
            raise ConfigurationError("apiVersion", str(e)) from e

        metadata = document["metadata"]
        spec = document["spec"]
        aws_config = pulumi.Config("aws")
        region = aws_config.require("region")

        n = spec.get("network") or {}
        network = NetworkConfig(
            max_azs=n.get("maxAzs", 2),
            cidr=n.get("cidr", "10.0.0.0/16"),
            nat_gateways=n.get("natGateways"),
        )
        _check_vpc_cidr(network)

        cap = spec.get("capacity") or {}
        desired = cap.get("desiredCapacity", 2)
        min_capacity = cap.get("minCapacity", 1)
        capacity = CapacityConfig(
            instance_type=cap.get("instanceType", "t2.micro"),
            desired_capacity=desired,
            min_capacity=min_capacity,
            max_capacity=cap.get("maxCapacity", max(desired, min_capacity, 1)),
        )
        if not capacity.min_capacity <= capacity.desired_capacity <= capacity.max_capacity:
            raise ConfigurationError(
                "capacity.desiredCapacity",
                f"must be within [minCapacity, maxCapacity] = "
                f"[{capacity.min_capacity}, {capacity.max_capacity}], got {capacity.desired_capacity}",
            )

        c = spec.get("container") or {}
        container = ContainerConfig(
            name=c.get("name", "MyContainer"),
            image=c.get("image", ""),
            port=c.get("port", 80),
            host_port=c.get("hostPort", c.get("port", 80)),
            protocol=c.get("protocol", "tcp"),
            cpu=c.get("cpu", 256),
            memory=c.get("memory", 512),
            log_stream_prefix=c.get("logStreamPrefix", "MyApp"),
            log_retention_days=c.get("logRetentionDays"),
            environment=c.get("environment") or {},
        )

        s = spec.get("service") or {}
        service = ServiceConfig(desired_count=s.get("desiredCount", 1))

        load_balancer = None
        if "loadBalancer" in spec and spec["loadBalancer"] is not None:
            lb = spec["loadBalancer"]
            listener = lb.get("listener") or {}
            target = lb.get("target") or {}
            hc = lb.get("healthCheck") or {}
            load_balancer = LoadBalancerConfig(
                internet_facing=lb.get("internetFacing", True),
                listener=ListenerConfig(
                    port=listener.get("port", 80),
                    open=listener.get("open", True),
                ),
                target_container_name=target.get("containerName", container.name),
                target_container_port=target.get("containerPort", container.port),
                health_check=HealthCheckConfig(
                    path=hc.get("path", "/"),
                    interval=hc.get("interval", 60),
                    timeout=hc.get("timeout", 5),
                    healthy_threshold=hc.get("healthyThreshold", 2),
                    unhealthy_threshold=hc.get("unhealthyThreshold", 5),
                ),
            )

        return cls(
            service_name=metadata["name"],
            region=region,
            raw_spec=spec,
            network=network,
            capacity=capacity,
            container=container,
            service=service,
            load_balancer=load_balancer,
        )


def _check_vpc_cidr(network: NetworkConfig) -> None:
    """VPC CIDR must be a network address with room for a public and a private subnet per AZ."""
    try:
        block = ipaddress.ip_network(network.cidr)
    except ValueError as e:
        raise ConfigurationError("network.cidr", str(e)) from e
    subnets = 2 * network.max_azs
    if block.prefixlen + (subnets - 1).bit_length() > MAX_SUBNET_PREFIX:
        raise ConfigurationError(
            "network.cidr",
            f"{network.cidr} too small for {subnets} subnets of at least /{MAX_SUBNET_PREFIX}",
        )


def load_stack_config() -> StackConfig:
    """Load stack.yaml from STACK_YAML_PATH environment variable."""
    path = os.environ.get("STACK_YAML_PATH")
    if not path:
        raise SystemExit("STACK_YAML_PATH environment variable required")
    if not Path(path).exists():
        raise SystemExit("STACK_YAML_PATH must point to stack.yaml")
    return StackConfig.from_file(path)


def create_aws_provider(service_name: str, region: str) -> pulumi_aws.Provider:
    """Create AWS provider with default resource tags."""
    return pulumi_aws.Provider(
        "aws-tagged",
        region=region,
        default_tags=pulumi_aws.ProviderDefaultTagsArgs(
            tags={
                "service": service_name,
                "managed-by": "ecsapp",
            }
        ),
    )
