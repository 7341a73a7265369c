"""Capability modules: each provisions one slice of the stack (capacity, load balancer, service)."""

from ecsapp.capabilities import capacity, loadbalancer, service  # noqa: F401 - register handlers
from ecsapp.capabilities.foundation import provision_foundation
from ecsapp.capabilities.registry import CAPABILITIES, run_capabilities

__all__ = ["CAPABILITIES", "provision_foundation", "run_capabilities"]
