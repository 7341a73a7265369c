"""Tests for foundation provisioning (VPC, security groups, IAM)."""

from unittest.mock import MagicMock, patch

from ecsapp.capabilities.context import CapabilityContext
from ecsapp.capabilities.foundation import provision_foundation
from ecsapp.config import LoadBalancerConfig, StackConfig
from ecsapp.networking.vpc import VpcResources


def _make_ctx(load_balancer: LoadBalancerConfig | None = None) -> CapabilityContext:
    config = StackConfig(
        service_name="test-svc",
        region="us-west-2",
        raw_spec={"container": {}},
        load_balancer=load_balancer,
    )
    infra = MagicMock()
    infra.availability_zones = ["us-west-2a", "us-west-2b"]
    return CapabilityContext(config=config, infra=infra, aws_provider=MagicMock())


def _vpc() -> VpcResources:
    vpc = MagicMock()
    vpc.id = "vpc-123"
    return VpcResources(vpc=vpc, public_subnet_ids=["pub-a", "pub-b"], private_subnet_ids=["priv-a", "priv-b"])


@patch("ecsapp.iam.roles.create_task_roles")
@patch("ecsapp.iam.roles.create_instance_role")
@patch("ecsapp.networking.security_groups.create_instance_security_group")
@patch("ecsapp.networking.security_groups.create_alb_security_group")
@patch("ecsapp.networking.vpc.create_vpc")
def test_foundation_with_load_balancer(
    mock_vpc: MagicMock,
    mock_alb_sg: MagicMock,
    mock_inst_sg: MagicMock,
    mock_instance_role: MagicMock,
    mock_task_roles: MagicMock,
) -> None:
    """All sections: VPC ids, ALB + instance SGs and IAM are published."""
    mock_vpc.return_value = _vpc()
    mock_alb_sg.return_value.id = "sg-alb"
    mock_instance_role.return_value = (MagicMock(), MagicMock())
    mock_task_roles.return_value = (MagicMock(), MagicMock())

    ctx = _make_ctx(LoadBalancerConfig())
    provision_foundation({"capacity": {}, "service": {}, "loadBalancer": {}}, ctx)

    assert mock_vpc.call_args[0][2] == ["us-west-2a", "us-west-2b"]
    assert ctx.require("vpc.id") == "vpc-123"
    assert ctx.require("vpc.private_subnet_ids") == ["priv-a", "priv-b"]
    assert ctx.require("security_groups.alb") is mock_alb_sg.return_value
    assert mock_inst_sg.call_args[1]["alb_sg_id"] == "sg-alb"
    assert ctx.require("iam.instance_profile") is mock_instance_role.return_value[1]
    assert ctx.require("iam.task_role") is mock_task_roles.return_value[0]
    assert ctx.require("iam.exec_role") is mock_task_roles.return_value[1]


@patch("ecsapp.iam.roles.create_task_roles")
@patch("ecsapp.iam.roles.create_instance_role")
@patch("ecsapp.networking.security_groups.create_instance_security_group")
@patch("ecsapp.networking.security_groups.create_alb_security_group")
@patch("ecsapp.networking.vpc.create_vpc")
def test_foundation_without_load_balancer(
    mock_vpc: MagicMock,
    mock_alb_sg: MagicMock,
    mock_inst_sg: MagicMock,
    mock_instance_role: MagicMock,
    mock_task_roles: MagicMock,
) -> None:
    mock_vpc.return_value = _vpc()
    mock_instance_role.return_value = (MagicMock(), MagicMock())
    mock_task_roles.return_value = (MagicMock(), MagicMock())

    ctx = _make_ctx()
    provision_foundation({"capacity": {}, "service": {}}, ctx)

    mock_alb_sg.assert_not_called()
    assert mock_inst_sg.call_args[1]["alb_sg_id"] is None

