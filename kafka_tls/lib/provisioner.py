"""Keystore provisioner: CA, trust store and per-host keystore generation."""

from collections.abc import Callable
from pathlib import Path

from .cert_utils import (
    build_csr,
    deserialize_certificate,
    deserialize_csr,
    deserialize_private_key,
    generate_private_key,
    get_certificate_serial_hex,
    serialize_certificate,
    serialize_csr,
    serialize_private_key,
)
from .certificate_builder import CertificateBuilder
from .config import ArtifactPaths, TLSConfig
from .errors import PreconditionError, ToolFailureError, UsageError
from .ext_config import read_extension_config, write_extension_config
from .keystore import Keystore
from .logging_config import LOGGER
from .models import ProvisionResult, StepResult
from .serial import next_serial


def validate_fqdn(fqdn: str | None) -> str:
    """Return the stripped FQDN or raise UsageError."""
    if fqdn is None or not fqdn.strip():
        raise UsageError("FQDN not supplied")
    fqdn = fqdn.strip()
    if "/" in fqdn or "\\" in fqdn or fqdn in (".", ".."):
        raise UsageError(f"FQDN must not contain path separators: {fqdn!r}")
    return fqdn


class KeystoreProvisioner:
    """Runs the provisioning pipeline for one host against a base directory."""

    def __init__(self, config: TLSConfig, base_dir: Path) -> None:
        """Initialize provisioner.

        Args:
            config: Identity fields, validity, store settings and mode
            base_dir: Directory holding the truststore/ and keystore/ working directories
        """
        self.config = config
        self.base_dir = base_dir

    def paths_for(self, fqdn: str) -> ArtifactPaths:
        return ArtifactPaths.for_fqdn(self.base_dir, self.config, fqdn)

    def check_preconditions(self, paths: ArtifactPaths) -> None:
        """Refuse to run if any host artifact already exists.

        Raises:
            PreconditionError: For the first artifact found on disk
        """
        for path in paths.host_outputs(self.config.mode):
            if path.exists():
                raise PreconditionError(path)

    def ensure_ca(self, paths: ArtifactPaths) -> StepResult:
        """Create the CA key and self-signed certificate unless the key already exists."""
        paths.truststore_dir.mkdir(parents=True, exist_ok=True)

        if paths.ca_key.exists():
            if not paths.ca_cert.exists():
                raise FileNotFoundError(f"CA key present but CA cert not found: {paths.ca_cert}")
            LOGGER.info("Reusing existing CA: %s", paths.ca_cert)
            return StepResult(name="ca", skipped=True)

        # A new CA would not be the one the existing cert or trust store vouches for
        for leftover in (paths.ca_cert, paths.truststore):
            if leftover.exists():
                raise FileNotFoundError(
                    f"CA key not found but {leftover} exists: restore {paths.ca_key} "
                    f"or remove the whole {paths.truststore_dir} directory"
                )

        LOGGER.info("Generating CA key pair and self-signed certificate")
        ca_key = generate_private_key(self.config.key_size)
        ca_cert = CertificateBuilder.build_ca(
            subject_dn=self.config.distinguished_name(self.config.ca_common_name),
            private_key=ca_key,
            validity_days=self.config.validity_days,
        )

        paths.ca_key.write_bytes(serialize_private_key(ca_key))
        paths.ca_cert.write_bytes(serialize_certificate(ca_cert))

        LOGGER.info("  CA key (signs host certificates): %s", paths.ca_key)
        LOGGER.info("  CA cert (stored in the trust store): %s", paths.ca_cert)
        return StepResult(name="ca", created=[paths.ca_key, paths.ca_cert])

    def ensure_truststore(self, paths: ArtifactPaths) -> StepResult:
        """Import the CA certificate into a new trust store unless one exists."""
        if paths.truststore.exists():
            LOGGER.info("Reusing existing trust store: %s", paths.truststore)
            return StepResult(name="truststore", skipped=True)

        ca_cert = deserialize_certificate(paths.ca_cert.read_bytes())
        truststore = Keystore()
        truststore.add_trusted_certificate(self.config.truststore_alias, ca_cert)
        truststore.save(paths.truststore, self.config.password_bytes)

        LOGGER.info("Trust store created: %s", paths.truststore)
        return StepResult(name="truststore", created=[paths.truststore])

    def create_host_request(self, fqdn: str, paths: ArtifactPaths) -> StepResult:
        """Generate the host key pair and its certificate signing request."""
        paths.keystore_dir.mkdir(parents=True, exist_ok=True)
        host_dn = self.config.distinguished_name(fqdn)
        host_key = generate_private_key(self.config.key_size)

        if self.config.mode == "csr":
            csr = build_csr(host_dn.to_x509_name(), host_key)
            paths.private_key.write_bytes(serialize_private_key(host_key))
            paths.csr.write_bytes(serialize_csr(csr))
            LOGGER.info("Host key and CSR created: %s, %s", paths.private_key, paths.csr)
            return StepResult(name="host-request", created=[paths.private_key, paths.csr])

        self_signed = CertificateBuilder.build_self_signed_host(
            subject_dn=host_dn,
            private_key=host_key,
            validity_days=self.config.validity_days,
        )
        keystore = Keystore()
        keystore.set_key_entry(self.config.keystore_alias, host_key, self_signed)
        keystore.save(paths.keystore, self.config.password_bytes)
        LOGGER.info("Keystore with self-signed key pair created: %s", paths.keystore)

        # The CSR comes from the stored entry, as a keystore tool would produce it
        keystore = Keystore.load(paths.keystore, self.config.password_bytes)
        entry = keystore.key_entry
        if entry is None:
            raise ValueError(f"no key entry in {paths.keystore}")
        csr = build_csr(entry.certificate.subject, entry.key, san_dns_names=[fqdn])
        paths.csr.write_bytes(serialize_csr(csr))
        LOGGER.info("CSR extracted from keystore: %s", paths.csr)

        return StepResult(name="host-request", created=[paths.keystore, paths.csr])

    def sign_host_certificate(self, fqdn: str, paths: ArtifactPaths) -> tuple[StepResult, str]:
        """Sign the host CSR with the CA, applying the written extension config.

        Returns:
            Tuple of (step result, serial number hex of the signed certificate)
        """
        write_extension_config(paths.ext_config, fqdn)
        extensions = read_extension_config(paths.ext_config)

        ca_key = deserialize_private_key(paths.ca_key.read_bytes())
        ca_cert = deserialize_certificate(paths.ca_cert.read_bytes())
        csr = deserialize_csr(paths.csr.read_bytes())

        signed = CertificateBuilder.build_host_certificate(
            csr=csr,
            ca_cert=ca_cert,
            ca_key=ca_key,
            validity_days=self.config.validity_days,
            extensions=extensions,
            serial_number=next_serial(paths.ca_serial),
        )
        paths.signed_cert.write_bytes(serialize_certificate(signed))

        serial_hex = get_certificate_serial_hex(signed)
        LOGGER.info("CA signed %s (serial %s): %s", fqdn, serial_hex, paths.signed_cert)
        return StepResult(name="sign", created=[paths.ext_config, paths.signed_cert]), serial_hex

    def assemble_keystore(self, paths: ArtifactPaths) -> StepResult:
        """Combine key, signed certificate and CA into the final keystore."""
        ca_cert = deserialize_certificate(paths.ca_cert.read_bytes())
        signed = deserialize_certificate(paths.signed_cert.read_bytes())
        password = self.config.password_bytes

        if self.config.mode == "csr":
            bundle = Keystore()
            bundle.set_key_entry(
                self.config.keystore_alias,
                deserialize_private_key(paths.private_key.read_bytes()),
                signed,
            )
            bundle.add_trusted_certificate(self.config.truststore_alias, ca_cert)
            bundle.save(paths.pkcs12_bundle, password)
            LOGGER.info("PKCS12 bundle with certificate chain created: %s", paths.pkcs12_bundle)

            Keystore.load(paths.pkcs12_bundle, password).save(paths.keystore, password)
            LOGGER.info("Keystore imported from bundle: %s", paths.keystore)
            return StepResult(name="assemble", created=[paths.pkcs12_bundle, paths.keystore])

        keystore = Keystore.load(paths.keystore, password)
        keystore.add_trusted_certificate(self.config.truststore_alias, ca_cert)
        keystore.import_certificate_reply(self.config.keystore_alias, signed)
        keystore.save(paths.keystore, password)
        LOGGER.info("CA and signed certificate imported into keystore: %s", paths.keystore)

        paths.private_key.write_bytes(keystore.private_key_pem())
        LOGGER.info("Private key exported: %s", paths.private_key)
        return StepResult(name="assemble", created=[paths.private_key])

    def cleanup_intermediates(self, paths: ArtifactPaths) -> StepResult:
        """Delete the fulfilled CSR and the extension config."""
        removed = []
        for path in (paths.csr, paths.ext_config):
            path.unlink()
            removed.append(path)
            LOGGER.info("Deleted intermediate file: %s", path)
        return StepResult(name="cleanup", removed=removed)

    def rollback(self, paths: ArtifactPaths) -> list[Path]:
        """Delete host artifacts left by a failed run. CA and trust store are kept."""
        removed = []
        for path in paths.host_outputs(self.config.mode):
            if path.exists():
                path.unlink()
                removed.append(path)
        LOGGER.info("Rolled back %d host artifacts", len(removed))
        return removed

    def provision(self, fqdn: str) -> ProvisionResult:
        """Provision CA (once), trust store (once) and a keystore for fqdn.

        Args:
            fqdn: Host name used as certificate CN and SAN

        Returns:
            ProvisionResult with artifact paths, step outcomes and serial

        Raises:
            UsageError: If fqdn is empty or contains path separators
            PreconditionError: If any host artifact already exists
            ToolFailureError: If any step fails; later steps are not run
        """
        fqdn = validate_fqdn(fqdn)
        paths = self.paths_for(fqdn)
        self.check_preconditions(paths)

        serial: list[str] = []

        def sign() -> StepResult:
            result, serial_hex = self.sign_host_certificate(fqdn, paths)
            serial.append(serial_hex)
            return result

        steps: list[tuple[str, Callable[[], StepResult]]] = [
            ("ca", lambda: self.ensure_ca(paths)),
            ("truststore", lambda: self.ensure_truststore(paths)),
            ("host-request", lambda: self.create_host_request(fqdn, paths)),
            ("sign", sign),
            ("assemble", lambda: self.assemble_keystore(paths)),
            ("cleanup", lambda: self.cleanup_intermediates(paths)),
        ]

        results: list[StepResult] = []
        for name, step in steps:
            LOGGER.info("Running step %s for %s", name, fqdn, extra={"step": name})
            try:
                results.append(step())
            except Exception as e:
                LOGGER.error("Step '%s' failed: %s", name, e, extra={"step": name})
                if self.config.cleanup_on_failure:
                    self.rollback(paths)
                raise ToolFailureError(name, e) from e

        return ProvisionResult(
            fqdn=fqdn,
            paths=paths,
            ca_created=not results[0].skipped,
            truststore_created=not results[1].skipped,
            serial_number=serial[0],
            steps=results,
        )
