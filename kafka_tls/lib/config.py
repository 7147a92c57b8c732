"""TLS provisioning configuration dataclasses."""

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from cryptography import x509
from cryptography.x509 import oid

from .errors import UsageError

MODES = ("keystore", "csr")


@dataclass(frozen=True)
class TLSConfig:
    """Identity fields, validity, store settings and workflow mode."""

    country: str = "US"
    state: str = "CA"
    locality: str = "Atlantis"
    organization: str = "CONFLUENT"
    ca_common_name: str = "certificate-authority"
    validity_days: int = 3650
    key_size: int = 2048
    store_password: str = "secret"
    truststore_alias: str = "CARoot"
    keystore_alias: str = "localhost"
    truststore_dir: str = "truststore"
    keystore_dir: str = "keystore"
    mode: str = "keystore"
    cleanup_on_failure: bool = False

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            # bool is a subclass of int, so int fields must reject it explicitly
            if not isinstance(value, f.type) or (f.type is int and isinstance(value, bool)):
                raise UsageError(
                    f"{f.name} must be {f.type.__name__}, got {type(value).__name__}: {value!r}"
                )
        if self.mode not in MODES:
            raise UsageError(f"unknown mode {self.mode!r}, expected one of {', '.join(MODES)}")
        if self.validity_days <= 0:
            raise UsageError("validity_days must be positive")
        if not self.store_password:
            raise UsageError("store_password must not be empty")

    @property
    def password_bytes(self) -> bytes:
        return self.store_password.encode("utf-8")

    def with_overrides(self, **overrides: Any) -> "TLSConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)

    def distinguished_name(self, common_name: str) -> "DistinguishedName":
        """Build DN from the identity fields + common_name."""
        return DistinguishedName(
            country=self.country,
            state=self.state,
            locality=self.locality,
            organization=self.organization,
            common_name=common_name,
        )


def load_config(path: Path) -> TLSConfig:
    """Load TLSConfig from a JSON object keyed by field name.

    Raises:
        UsageError: If the file is unreadable, not a JSON object, has unknown
            keys, or a value of the wrong type
    """
    try:
        data = json.loads(path.read_text())
    except FileNotFoundError as e:
        raise UsageError(f"config file not found: {path}") from e
    except OSError as e:
        raise UsageError(f"config file cannot be read: {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise UsageError(f"config file is not UTF-8 text: {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise UsageError(f"config file is not valid JSON: {path}: {e}") from e

    if not isinstance(data, dict):
        raise UsageError(f"config file must contain a JSON object: {path}")

    known = {f.name for f in fields(TLSConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise UsageError(f"unknown config keys in {path}: {', '.join(unknown)}")

    try:
        return TLSConfig(**data)
    except TypeError as e:
        raise UsageError(f"invalid value in config file {path}: {e}") from e


@dataclass
class DistinguishedName:
    """X.509 Subject Distinguished Name."""

    country: str
    state: str
    locality: str
    organization: str
    common_name: str

    def to_x509_name(self) -> x509.Name:
        """Convert to cryptography x509.Name for certificate generation."""
        return x509.Name(
            [
                x509.NameAttribute(oid.NameOID.COUNTRY_NAME, self.country),
                x509.NameAttribute(oid.NameOID.STATE_OR_PROVINCE_NAME, self.state),
                x509.NameAttribute(oid.NameOID.LOCALITY_NAME, self.locality),
                x509.NameAttribute(oid.NameOID.ORGANIZATION_NAME, self.organization),
                x509.NameAttribute(oid.NameOID.COMMON_NAME, self.common_name),
            ]
        )


@dataclass(frozen=True)
class ArtifactPaths:
    """Filesystem layout for one FQDN under a base directory."""

    truststore_dir: Path
    keystore_dir: Path
    ca_key: Path
    ca_cert: Path
    ca_serial: Path
    truststore: Path
    private_key: Path
    signed_cert: Path
    csr: Path
    keystore: Path
    ext_config: Path
    pkcs12_bundle: Path

    @classmethod
    def for_fqdn(cls, base_dir: Path, config: TLSConfig, fqdn: str) -> "ArtifactPaths":
        truststore_dir = base_dir / config.truststore_dir
        keystore_dir = base_dir / config.keystore_dir
        return cls(
            truststore_dir=truststore_dir,
            keystore_dir=keystore_dir,
            ca_key=truststore_dir / "ca-key.pem",
            ca_cert=truststore_dir / "ca.crt",
            ca_serial=truststore_dir / "ca.srl",
            truststore=truststore_dir / "truststore.jks",
            private_key=keystore_dir / f"{fqdn}-key.pem",
            signed_cert=keystore_dir / f"{fqdn}-signed.crt",
            csr=keystore_dir / f"{fqdn}.csr",
            keystore=keystore_dir / f"{fqdn}-keystore.jks",
            ext_config=keystore_dir / f"{fqdn}.cnf",
            pkcs12_bundle=keystore_dir / f"{fqdn}.p12",
        )

    def host_outputs(self, mode: str) -> list[Path]:
        """Host artifacts that must not exist before a run in the given mode."""
        outputs = [
            self.private_key,
            self.signed_cert,
            self.csr,
            self.keystore,
            self.ext_config,
        ]
        if mode == "csr":
            outputs.append(self.pkcs12_bundle)
        return outputs
