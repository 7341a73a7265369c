"""Tests for region lookups (availability zones, ECS AMI)."""

from unittest.mock import MagicMock, patch

import pytest

from ecsapp.shared.lookups import ECS_AMI_PARAMETER, SharedInfrastructure, lookup_shared_infrastructure


@patch("ecsapp.shared.lookups.pulumi_aws.ssm.get_parameter")
@patch("ecsapp.shared.lookups.pulumi_aws.get_availability_zones")
def test_lookup_shared_infrastructure(
    mock_get_azs: MagicMock,
    mock_get_param: MagicMock,
) -> None:
    """AZs are truncated to max_azs; AMI comes from the ECS SSM parameter."""
    mock_get_azs.return_value.names = ["us-west-2a", "us-west-2b", "us-west-2c"]
    mock_get_param.return_value.value = "ami-0123"

    result = lookup_shared_infrastructure(2, MagicMock())

    assert isinstance(result, SharedInfrastructure)
    assert result.availability_zones == ["us-west-2a", "us-west-2b"]
    assert result.ecs_ami_id == "ami-0123"
    assert mock_get_param.call_args[1]["name"] == ECS_AMI_PARAMETER
    assert mock_get_azs.call_args[1]["state"] == "available"


@patch("ecsapp.shared.lookups.pulumi_aws.ssm.get_parameter")
@patch("ecsapp.shared.lookups.pulumi_aws.get_availability_zones")
def test_lookup_no_zones(mock_get_azs: MagicMock, mock_get_param: MagicMock) -> None:
    mock_get_azs.return_value.names = []
    with pytest.raises(SystemExit):
        lookup_shared_infrastructure(2, MagicMock())
    mock_get_param.assert_not_called()


@patch("ecsapp.shared.lookups.pulumi_aws.ssm.get_parameter")
@patch("ecsapp.shared.lookups.pulumi_aws.get_availability_zones")
def test_lookup_no_ami(mock_get_azs: MagicMock, mock_get_param: MagicMock) -> None:
    mock_get_azs.return_value.names = ["us-west-2a"]
    mock_get_param.return_value.value = ""
    with pytest.raises(SystemExit):
        lookup_shared_infrastructure(2, MagicMock())
