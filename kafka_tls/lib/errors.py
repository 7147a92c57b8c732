"""Exceptions raised while provisioning TLS stores."""

from pathlib import Path


class TLSProvisioningError(Exception):
    """Base class for provisioning failures reported to the operator."""


class UsageError(TLSProvisioningError):
    """Missing FQDN argument or invalid configuration."""


class PreconditionError(TLSProvisioningError):
    """An output artifact already exists and would be overwritten."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"'{path}' cannot exist. Move or delete it before re-running this script."
        )


class ToolFailureError(TLSProvisioningError):
    """A cryptographic step of the pipeline failed."""

    def __init__(self, step: str, cause: BaseException) -> None:
        self.step = step
        self.cause = cause
        super().__init__(f"step '{step}' failed: {cause}")
