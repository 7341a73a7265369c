"""Tests for the capacity and service capability handlers."""

from unittest.mock import MagicMock, patch

from ecsapp.capabilities.context import CapabilityContext
from ecsapp.capabilities.registry import CAPABILITIES
from ecsapp.config import CapacityConfig, ContainerConfig, StackConfig


def _make_ctx(image: str = "") -> CapabilityContext:
    config = StackConfig(
        service_name="test-svc",
        region="us-west-2",
        raw_spec={"container": {}},
        capacity=CapacityConfig(desired_capacity=2, max_capacity=2),
        container=ContainerConfig(image=image),
    )
    infra = MagicMock()
    infra.ecs_ami_id = "ami-ecs"
    return CapabilityContext(config=config, infra=infra, aws_provider=MagicMock())


@patch("ecsapp.capabilities.capacity.create_capacity")
@patch("ecsapp.capabilities.capacity.create_ecs_cluster")
def test_capacity_handler_uses_foundation_outputs(
    mock_cluster: MagicMock,
    mock_capacity: MagicMock,
) -> None:
    """Capacity handler creates cluster and ASG in private subnets; publishes cluster."""
    ctx = _make_ctx()
    profile = MagicMock()
    sg = MagicMock()
    ctx.set("iam.instance_profile", profile)
    ctx.set("security_groups.instances", sg)
    ctx.set("vpc.private_subnet_ids", ["priv-a", "priv-b"])

    CAPABILITIES["capacity"].handler({}, ctx)

    args = mock_capacity.call_args[0]
    assert args[0] == "test-svc"
    assert args[1].desired_capacity == 2
    assert args[2] is mock_cluster.return_value
    assert args[3] == "ami-ecs"
    assert args[4] is profile
    assert args[5] is sg
    assert args[6] == ["priv-a", "priv-b"]
    assert ctx.require("ecs.cluster") is mock_cluster.return_value
    assert "ecs_cluster_name" in ctx.exports
    assert "autoscaling_group_name" in ctx.exports


def _with_compute_outputs(ctx: CapabilityContext) -> CapabilityContext:
    ctx.set("ecs.cluster", MagicMock())
    ctx.set("iam.task_role", MagicMock())
    ctx.set("iam.exec_role", MagicMock())
    return ctx


@patch("ecsapp.capabilities.service.pulumi.log")
@patch("ecsapp.capabilities.service.create_ecs_service")
@patch("ecsapp.capabilities.service.create_task_definition")
@patch("ecsapp.capabilities.service.create_log_group")
@patch("ecsapp.capabilities.service.resolve_image")
def test_service_handler_attaches_to_load_balancer(
    mock_image: MagicMock,
    mock_logs: MagicMock,
    mock_task_def: MagicMock,
    mock_svc: MagicMock,
    mock_log: MagicMock,
) -> None:
    """Service handler passes registration/target group and depends on the listener."""
    repo = MagicMock()
    mock_image.return_value = (MagicMock(), repo)
    ctx = _with_compute_outputs(_make_ctx())
    registration = MagicMock()
    target_group = MagicMock()
    listener = MagicMock()
    ctx.set("loadBalancer.registration", registration)
    ctx.set("loadBalancer.target_group", target_group)
    ctx.set("loadBalancer.listener", listener)

    CAPABILITIES["service"].handler({}, ctx)

    call_kw = mock_svc.call_args[1]
    assert call_kw["registration"] is registration
    assert call_kw["target_group"] is target_group
    assert call_kw["depends_on"] == [listener]
    assert mock_task_def.call_args[0][1] is mock_image.return_value[0]
    assert mock_task_def.call_args[0][2] is mock_logs.return_value
    assert ctx.exports["ecr_repository_uri"] is repo.repository_url
    assert "ecs_service_name" in ctx.exports
    assert "log_group_name" in ctx.exports


@patch("ecsapp.capabilities.service.pulumi.log")
@patch("ecsapp.capabilities.service.create_ecs_service")
@patch("ecsapp.capabilities.service.create_task_definition")
@patch("ecsapp.capabilities.service.create_log_group")
@patch("ecsapp.capabilities.service.resolve_image")
def test_service_handler_without_load_balancer(
    mock_image: MagicMock,
    mock_logs: MagicMock,
    mock_task_def: MagicMock,
    mock_svc: MagicMock,
    mock_log: MagicMock,
) -> None:
    """Without a load balancer the service is unattached and a warning is logged."""
    mock_image.return_value = (MagicMock(), None)
    ctx = _with_compute_outputs(_make_ctx(image="nginx:stable"))

    CAPABILITIES["service"].handler({}, ctx)

    call_kw = mock_svc.call_args[1]
    assert call_kw["registration"] is None
    assert call_kw["depends_on"] is None
    assert "ecr_repository_uri" not in ctx.exports
    mock_log.warn.assert_called_once()
