"""Result models for provisioning pipeline steps."""

from dataclasses import dataclass, field
from pathlib import Path

from .config import ArtifactPaths


@dataclass
class StepResult:
    """Outcome of one pipeline step.

    skipped is True when the step found its outputs already present and
    reused them unchanged.
    """

    name: str
    created: list[Path] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)
    skipped: bool = False


@dataclass
class ProvisionResult:
    """Result from provisioning a host keystore.

    Contains artifact paths, whether the CA and trust store were created by
    this run, and the serial number of the signed host certificate.
    """

    fqdn: str
    paths: ArtifactPaths
    ca_created: bool
    truststore_created: bool
    serial_number: str
    steps: list[StepResult] = field(default_factory=list)
