#!/usr/bin/env python3
"""Generate a CA, trust store and host keystore for Kafka TLS."""

import argparse
import os
import sys
from pathlib import Path

from kafka_tls.lib.config import MODES, TLSConfig, load_config
from kafka_tls.lib.errors import PreconditionError, ToolFailureError, UsageError
from kafka_tls.lib.logging_config import LOGGER
from kafka_tls.lib.provisioner import KeystoreProvisioner

PASSWORD_ENV_VAR = "KAFKA_TLS_STORE_PASSWORD"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a CA, trust store and per-host keystore for broker/client TLS"
    )
    # Optional so a missing FQDN exits 1 rather than argparse's 2
    parser.add_argument(
        "fqdn",
        nargs="?",
        help="Fully-qualified domain name of the broker or client (CN and SAN)",
    )
    parser.add_argument(
        "--base-dir",
        type=Path,
        default=Path("."),
        help="Directory holding truststore/ and keystore/ (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON file with identity, validity and store settings",
    )
    parser.add_argument(
        "--mode",
        choices=MODES,
        help="keystore: self-signed key entry then CSR; csr: CSR first, then PKCS12 bundle",
    )
    parser.add_argument(
        "--store-password",
        help=f"Password for trust store and keystore (default: ${PASSWORD_ENV_VAR} or config)",
    )
    parser.add_argument(
        "--cleanup-on-failure",
        action="store_true",
        default=None,
        help="Delete host artifacts created by a failed run",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> TLSConfig:
    """Merge config file, environment and command-line flags (later wins)."""
    config = load_config(args.config) if args.config else TLSConfig()
    return config.with_overrides(
        mode=args.mode,
        store_password=args.store_password or os.environ.get(PASSWORD_ENV_VAR),
        cleanup_on_failure=args.cleanup_on_failure,
    )


def main() -> int:
    """Provision trust store and keystore for the FQDN given on the command line.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = build_parser().parse_args()

    try:
        if not args.fqdn:
            raise UsageError("FQDN not supplied")

        config = resolve_config(args)
        provisioner = KeystoreProvisioner(config, args.base_dir)

        LOGGER.info("Generating Kafka SSL keystore and trust store for: %s", args.fqdn)
        result = provisioner.provision(args.fqdn)

        LOGGER.info("Trust store:")
        LOGGER.info("  CA key: %s", result.paths.ca_key)
        LOGGER.info("  CA cert: %s", result.paths.ca_cert)
        LOGGER.info("  Trust store: %s", result.paths.truststore)
        LOGGER.info("Keystore:")
        LOGGER.info("  Keystore: %s", result.paths.keystore)
        LOGGER.info("  Key: %s", result.paths.private_key)
        LOGGER.info("  Signed cert: %s", result.paths.signed_cert)
        LOGGER.info("  Serial: %s", result.serial_number)

        LOGGER.info("All done. Each broker or client needs its own keystore; re-run for more hosts.")
        return 0

    except (UsageError, PreconditionError) as e:
        LOGGER.error("%s", e)
        return 1
    except ToolFailureError as e:
        LOGGER.error("Provisioning failed at step '%s': %s", e.step, e.cause)
        return 1


if __name__ == "__main__":
    sys.exit(main())
