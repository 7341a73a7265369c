"""Tests for target registration (binding + health check policy validation)."""

from dataclasses import FrozenInstanceError
from datetime import timedelta

import pytest

from ecsapp.errors import ConfigurationError
from ecsapp.loadbalancer.registration import (
    HealthCheckPolicy,
    Protocol,
    TargetBinding,
    register_target,
)


def _binding(**overrides) -> TargetBinding:
    fields = {"container_name": "MyContainer", "container_port": 80, "protocol": Protocol.TCP}
    fields.update(overrides)
    return TargetBinding(**fields)


def _policy(**overrides) -> HealthCheckPolicy:
    fields = {
        "path": "/",
        "interval": timedelta(seconds=60),
        "timeout": timedelta(seconds=5),
        "healthy_threshold": 2,
        "unhealthy_threshold": 5,
    }
    fields.update(overrides)
    return HealthCheckPolicy(**fields)


def test_register_target_echoes_all_fields() -> None:
    """MyContainer:80, / every 60s (5s timeout, 2/5 thresholds), listener 80 succeeds unchanged."""
    binding = _binding()
    policy = _policy()
    registration = register_target(binding, policy, 80)
    assert registration.listener_port == 80
    assert registration.binding == binding
    assert registration.binding.container_name == "MyContainer"
    assert registration.binding.container_port == 80
    assert registration.binding.protocol is Protocol.TCP
    assert registration.health_check == policy
    assert registration.health_check.path == "/"
    assert registration.health_check.interval == timedelta(seconds=60)
    assert registration.health_check.timeout == timedelta(seconds=5)
    assert registration.health_check.healthy_threshold == 2
    assert registration.health_check.unhealthy_threshold == 5


@pytest.mark.parametrize(
    ("container_port", "listener_port", "interval", "timeout", "healthy", "unhealthy"),
    [
        (1, 1, 2, 1, 1, 1),
        (65535, 65535, 300, 120, 10, 10),
        (8080, 443, 30, 29, 3, 2),
    ],
)
def test_register_target_valid_boundaries(
    container_port: int,
    listener_port: int,
    interval: int,
    timeout: int,
    healthy: int,
    unhealthy: int,
) -> None:
    """Boundary values inside the valid ranges are accepted and round-trip."""
    binding = _binding(container_port=container_port)
    policy = _policy(
        interval=timedelta(seconds=interval),
        timeout=timedelta(seconds=timeout),
        healthy_threshold=healthy,
        unhealthy_threshold=unhealthy,
    )
    registration = register_target(binding, policy, listener_port)
    assert registration.listener_port == listener_port
    assert registration.binding is binding
    assert registration.health_check is policy


def test_timeout_equal_to_interval_fails_on_timeout() -> None:
    """timeout=60s, interval=60s is rejected on field 'timeout'."""
    policy = _policy(interval=timedelta(seconds=60), timeout=timedelta(seconds=60))
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(), policy, 80)
    assert exc_info.value.field == "timeout"


def test_timeout_greater_than_interval_fails() -> None:
    policy = _policy(interval=timedelta(seconds=10), timeout=timedelta(seconds=30))
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(), policy, 80)
    assert exc_info.value.field == "timeout"


@pytest.mark.parametrize(
    ("field", "interval", "timeout"),
    [
        ("timeout", timedelta(seconds=1), timedelta(milliseconds=500)),
        ("interval", timedelta(seconds=30, milliseconds=250), timedelta(seconds=5)),
    ],
)
def test_sub_second_duration_fails(field: str, interval: timedelta, timeout: timedelta) -> None:
    """Durations that cannot be expressed in whole seconds are rejected, not truncated."""
    policy = _policy(interval=interval, timeout=timeout)
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(), policy, 80)
    assert exc_info.value.field == field
    assert "whole seconds" in str(exc_info.value)


def test_zero_timeout_fails() -> None:
    policy = _policy(timeout=timedelta(0))
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(), policy, 80)
    assert exc_info.value.field == "timeout"


@pytest.mark.parametrize("port", [0, 65536, -1])
def test_container_port_out_of_range_fails(port: int) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(container_port=port), _policy(), 80)
    assert exc_info.value.field == "container_port"


@pytest.mark.parametrize("port", [0, 65536])
def test_listener_port_out_of_range_fails(port: int) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(), _policy(), port)
    assert exc_info.value.field == "listener_port"


@pytest.mark.parametrize("field", ["healthy_threshold", "unhealthy_threshold"])
def test_threshold_below_one_fails(field: str) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(), _policy(**{field: 0}), 80)
    assert exc_info.value.field == field


def test_path_without_leading_slash_fails() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(), _policy(path="health"), 80)
    assert exc_info.value.field == "path"


def test_empty_container_name_fails() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(container_name=""), _policy(), 80)
    assert exc_info.value.field == "container_name"


def test_udp_binding_rejected_for_http_health_check() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(protocol=Protocol.UDP), _policy(), 80)
    assert exc_info.value.field == "protocol"


def test_unknown_container_name_fails() -> None:
    """known_containers restricts container_name to the task definition's containers."""
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(container_name="Other"), _policy(), 80, known_containers=["MyContainer"])
    assert exc_info.value.field == "container_name"
    assert "MyContainer" in str(exc_info.value)


def test_known_container_name_passes() -> None:
    registration = register_target(_binding(), _policy(), 80, known_containers={"MyContainer", "sidecar"})
    assert registration.binding.container_name == "MyContainer"


def test_error_message_names_field() -> None:
    """str(ConfigurationError) starts with the field name."""
    with pytest.raises(ConfigurationError) as exc_info:
        register_target(_binding(container_port=0), _policy(), 80)
    assert str(exc_info.value).startswith("container_port:")


def test_registration_is_immutable() -> None:
    registration = register_target(_binding(), _policy(), 80)
    with pytest.raises(FrozenInstanceError):
        registration.listener_port = 8080  # type: ignore[misc]
    with pytest.raises(FrozenInstanceError):
        registration.binding.container_port = 8080  # type: ignore[misc]
    with pytest.raises(FrozenInstanceError):
        registration.health_check.path = "/x"  # type: ignore[misc]
