"""Runnable scripts for common dev tasks. Use: uv run <script-name> (see pyproject.toml)."""

import subprocess
import sys

SOURCES = ["ecsapp", "tests"]


def _run(args: list[str]) -> None:
    """Run a command; exit with its code."""
    sys.exit(subprocess.run(args).returncode)


def lint() -> None:
    """Run ruff check on ecsapp and tests."""
    _run([sys.executable, "-m", "ruff", "check", *SOURCES])


def lint_fix() -> None:
    """Run ruff check --fix on ecsapp and tests."""
    _run([sys.executable, "-m", "ruff", "check", "--fix", *SOURCES])


def format() -> None:
    """Run ruff format on ecsapp and tests."""
    _run([sys.executable, "-m", "ruff", "format", *SOURCES])


def type_check() -> None:
    """Run pyright on ecsapp."""
    _run([sys.executable, "-m", "pyright", "ecsapp"])


def test() -> None:
    """Run pytest."""
    _run([sys.executable, "-m", "pytest", "tests/", "-v"])


def test_cov() -> None:
    """Run pytest with coverage report."""
    _run([sys.executable, "-m", "pytest", "tests/", "--cov=ecsapp", "--cov-report=term-missing", "-v"])
