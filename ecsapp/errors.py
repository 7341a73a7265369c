"""Error types: configuration errors (ours) vs provisioning errors (the engine's)."""


class ConfigurationError(Exception):
    """Invalid field value, detected before anything is submitted to Pulumi."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class ExternalProvisioningError(Exception):
    """A Pulumi engine command failed. Opaque; details are in the engine's output."""

    def __init__(self, command: list[str], returncode: int) -> None:
        super().__init__(f"'{' '.join(command)}' exited with status {returncode}")
        self.command = command
        self.returncode = returncode
