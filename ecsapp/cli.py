"""
ecsapp CLI: setup, list, preview, create, outputs, verify, destroy.
Run `ecsapp setup` once; then `ecsapp create stack.yaml`, `ecsapp verify <service>`.
"""

import json
import os
from pathlib import Path
import subprocess
import sys
from typing import Any

import yaml

from ecsapp.errors import ExternalProvisioningError

CONFIG_DIR = ".ecsapp"
CONFIG_FILENAME = "config.yaml"
TAG_MANAGED_BY = "managed-by"
TAG_SERVICE = "service"
MANAGED_BY_VALUE = "ecsapp"
DEFAULT_STACK_PREFIX = "dev"
PULUMI = "pulumi"
PROGRAM_DIR = "ecsapp"
DNS_OUTPUT = "LoadBalancerDNS"


def _project_root() -> Path:
    """Directory containing ecsapp/Pulumi.yaml. Defaults to cwd."""
    return Path.cwd()


def _config_path() -> Path:
    return _project_root() / CONFIG_DIR / CONFIG_FILENAME


def _load_config() -> dict[str, Any] | None:
    path = _config_path()
    if not path.exists():
        return None
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else None


def _save_config(backend_url: str, region: str, stack_prefix: str = DEFAULT_STACK_PREFIX) -> None:
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            {
                "backend_url": backend_url,
                "region": region,
                "stack_prefix": stack_prefix,
            },
            f,
            default_flow_style=False,
        )
    print(f"Configuration saved to {path}")


def _require_config() -> dict[str, Any]:
    config = _load_config()
    if not config or not config.get("backend_url") or not config.get("region"):
        print("Configuration missing or incomplete. Run: ecsapp setup", file=sys.stderr)
        sys.exit(1)
    return config


def _require_program() -> None:
    if not (_project_root() / PROGRAM_DIR / "Pulumi.yaml").exists():
        print(f"{PROGRAM_DIR}/Pulumi.yaml not found. Run this from the repository root.", file=sys.stderr)
        sys.exit(1)


def _run(
    cmd: list[str],
    env: dict[str, str] | None = None,
    check: bool = True,
    capture: bool = False,
) -> subprocess.CompletedProcess:
    """Run a pulumi command in the program directory.

    Raises:
        ExternalProvisioningError: check is True and the command failed.
    """
    full_env = os.environ.copy()
    if env:
        full_env.update(env)
    result = subprocess.run(
        cmd,
        cwd=_project_root(),
        env=full_env,
        check=False,
        capture_output=capture,
        text=capture,
    )
    if check and result.returncode != 0:
        raise ExternalProvisioningError(cmd, result.returncode)
    return result


def _service_name_from_yaml(path: Path) -> str:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data["metadata"]["name"]


def _stack_name(service_name: str, config: dict[str, Any]) -> str:
    prefix = config.get("stack_prefix", DEFAULT_STACK_PREFIX)
    region = config["region"]
    return f"{prefix}.{service_name}.{region}"


def _select_stack(stack: str, env: dict[str, str], create: bool) -> bool:
    """Select stack; init it when missing and create is True. Returns whether it exists."""
    select = _run([PULUMI, "stack", "select", stack, "-C", PROGRAM_DIR], env=env, check=False)
    if select.returncode == 0:
        return True
    if not create:
        return False
    _run([PULUMI, "stack", "init", stack, "-C", PROGRAM_DIR], env=env)
    return True


def _stack_outputs(service_name: str) -> dict[str, Any]:
    config = _require_config()
    stack = _stack_name(service_name, config)
    env = {"PULUMI_BACKEND_URL": config["backend_url"]}
    if not _select_stack(stack, env, create=False):
        print(f"No infrastructure found for service '{service_name}' (stack {stack}).", file=sys.stderr)
        sys.exit(1)
    result = _run([PULUMI, "stack", "output", "--json", "-C", PROGRAM_DIR], env=env, capture=True)
    return json.loads(result.stdout or "{}")


# --- setup ---


def _cmd_setup() -> None:
    print("First-time setup. You will need:")
    print("  1) AWS credentials (e.g. run: aws sso login)")
    print("  2) Backend URL for infrastructure state (e.g. s3://your-account-pulumi-state)")
    print("  3) Default AWS region (e.g. us-west-2)")
    print()

    backend_url = os.environ.get("ECSAPP_BACKEND_URL", "").strip()
    if not backend_url:
        backend_url = input("Backend URL for infrastructure state: ").strip()
    if not backend_url:
        print("Backend URL is required.", file=sys.stderr)
        sys.exit(1)

    region = os.environ.get("ECSAPP_REGION", "").strip()
    if not region:
        region = input("Default AWS region (e.g. us-west-2): ").strip()
    if not region:
        print("Region is required.", file=sys.stderr)
        sys.exit(1)

    stack_prefix = os.environ.get("ECSAPP_STACK_PREFIX", DEFAULT_STACK_PREFIX).strip() or DEFAULT_STACK_PREFIX
    _save_config(backend_url, region, stack_prefix)
    print("Setup complete. You can now use: ecsapp create <stack.yaml>, ecsapp verify <service>")


# --- list ---


def _cmd_list() -> None:
    import boto3

    config = _load_config()
    region = config.get("region") if config else os.environ.get("AWS_REGION", "us-west-2")
    client = boto3.client("resourcegroupstaggingapi", region_name=region)
    services: dict[str, list[dict[str, str]]] = {}

    paginator = client.get_paginator("get_resources")
    for page in paginator.paginate(
        TagFilters=[{"Key": TAG_MANAGED_BY, "Values": [MANAGED_BY_VALUE]}],
        ResourcesPerPage=100,
    ):
        for r in page.get("ResourceTagList", []):
            arn = r.get("ResourceARN", "")
            tags = {t["Key"]: t["Value"] for t in r.get("Tags", [])}
            svc = tags.get(TAG_SERVICE, "?")
            resource_type = arn.split(":")[2] if ":" in arn else "resource"
            services.setdefault(svc, []).append({"arn": arn, "type": resource_type})

    if not services:
        print("No ecsapp-managed resources found.")
        return
    for name in sorted(services):
        print(f"\n{name}")
        for r in services[name]:
            print(f"  {r['type']}: {r['arn']}")


# --- preview / create ---


def _cmd_up(stack_yaml_path: str, preview: bool) -> None:
    config = _require_config()
    path = Path(stack_yaml_path)
    if not path.is_absolute():
        path = _project_root() / path
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        sys.exit(1)
    _require_program()
    service_name = _service_name_from_yaml(path)
    stack = _stack_name(service_name, config)
    region = config["region"]

    env = {
        "STACK_YAML_PATH": str(path.resolve()),
        "PULUMI_BACKEND_URL": config["backend_url"],
    }
    _select_stack(stack, env, create=True)
    _run([PULUMI, "config", "set", "aws:region", region, "-C", PROGRAM_DIR], env=env)
    if preview:
        _run([PULUMI, "preview", "-C", PROGRAM_DIR], env=env)
        return
    print(f"Provisioning infrastructure for service '{service_name}'...")
    _run([PULUMI, "up", "-C", PROGRAM_DIR, "-y"], env=env)
    outputs = _stack_outputs(service_name)
    dns = outputs.get(DNS_OUTPUT)
    if dns:
        print(f"Service '{service_name}' provisioned. URL: http://{dns}")
    else:
        print(f"Service '{service_name}' provisioned (no load balancer declared).")


# --- outputs / verify ---


def _cmd_outputs(service_name: str) -> None:
    print(json.dumps(_stack_outputs(service_name), indent=2, sort_keys=True))


def _cmd_verify(service_name: str, path: str, retries: int) -> None:
    from ecsapp.verify import check_endpoint

    dns = _stack_outputs(service_name).get(DNS_OUTPUT)
    if not dns:
        print(f"Stack for '{service_name}' has no {DNS_OUTPUT} output.", file=sys.stderr)
        sys.exit(1)
    result = check_endpoint(dns, path=path, retries=retries)
    print(json.dumps({"check": result.url, "status": result.status, "attempts": result.attempts,
                      "status_code": result.status_code, "error": result.error}))
    if not result.passed:
        sys.exit(1)


# --- destroy ---


def _cmd_destroy(service_name: str) -> None:
    config = _require_config()
    stack = _stack_name(service_name, config)
    _require_program()

    env = {"PULUMI_BACKEND_URL": config["backend_url"]}
    if not _select_stack(stack, env, create=False):
        print(f"No infrastructure found for service '{service_name}' (stack {stack}).", file=sys.stderr)
        sys.exit(1)
    confirm = input(f"This will remove all infrastructure for service '{service_name}'. Continue? [y/N]: ")
    if confirm.strip().lower() != "y":
        print("Cancelled.")
        sys.exit(0)
    _run([PULUMI, "destroy", "-C", PROGRAM_DIR, "-y"], env=env)
    rm = _run([PULUMI, "stack", "rm", stack, "-C", PROGRAM_DIR, "--yes"], env=env, check=False)
    if rm.returncode != 0:
        print(f"Stack {stack} could not be removed; it may already be gone.", file=sys.stderr)
    print(f"Service '{service_name}' removed.")


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(
        description="Manage ecsapp stacks (preview, create, verify, destroy). Run 'ecsapp setup' first."
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("setup", help="One-time setup: state backend, region, stack prefix")
    sub.add_parser("list", help="List ecsapp-managed resources by service")
    preview_p = sub.add_parser("preview", help="Show the changes a stack.yaml would make")
    preview_p.add_argument("stack_yaml", help="Path to stack.yaml")
    create_p = sub.add_parser("create", help="Provision infrastructure from a stack.yaml")
    create_p.add_argument("stack_yaml", help="Path to stack.yaml")
    outputs_p = sub.add_parser("outputs", help="Print stack outputs as JSON")
    outputs_p.add_argument("service_name", help="Service name (from stack.yaml metadata.name)")
    verify_p = sub.add_parser("verify", help="Probe the load balancer until the service is healthy")
    verify_p.add_argument("service_name", help="Service name (from stack.yaml metadata.name)")
    verify_p.add_argument("--path", default="/", help="Path to probe (default: /)")
    verify_p.add_argument("--retries", type=int, default=10, help="Attempts before failing")
    destroy_p = sub.add_parser("destroy", help="Remove all infrastructure for a service")
    destroy_p.add_argument("service_name", help="Service name (from stack.yaml metadata.name)")
    args = parser.parse_args()

    try:
        if args.command == "setup":
            _cmd_setup()
        elif args.command == "list":
            _cmd_list()
        elif args.command == "preview":
            _cmd_up(args.stack_yaml, preview=True)
        elif args.command == "create":
            _cmd_up(args.stack_yaml, preview=False)
        elif args.command == "outputs":
            _cmd_outputs(args.service_name)
        elif args.command == "verify":
            _cmd_verify(args.service_name, args.path, args.retries)
        elif args.command == "destroy":
            _cmd_destroy(args.service_name)
        else:
            parser.print_help()
            sys.exit(1)
    except ExternalProvisioningError as e:
        print(f"Provisioning failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
