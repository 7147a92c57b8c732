"""OpenSSL-style extension config written for, and read back by, the CA signer."""

import configparser
from dataclasses import dataclass, field
from pathlib import Path

from cryptography.x509.oid import ExtendedKeyUsageOID, ObjectIdentifier

EXTENSION_SECTION = "v3_ca"

EXTENDED_KEY_USAGES: dict[str, ObjectIdentifier] = {
    "serverAuth": ExtendedKeyUsageOID.SERVER_AUTH,
    "clientAuth": ExtendedKeyUsageOID.CLIENT_AUTH,
    "codeSigning": ExtendedKeyUsageOID.CODE_SIGNING,
    "emailProtection": ExtendedKeyUsageOID.EMAIL_PROTECTION,
    "timeStamping": ExtendedKeyUsageOID.TIME_STAMPING,
    "OCSPSigning": ExtendedKeyUsageOID.OCSP_SIGNING,
}


@dataclass
class SigningExtensions:
    """Extensions the CA applies when signing a host CSR."""

    extended_key_usage: list[ObjectIdentifier] = field(default_factory=list)
    dns_names: list[str] = field(default_factory=list)


def render_extension_config(fqdn: str) -> str:
    """Render the [v3_ca] section declaring server/client auth and SAN DNS:<fqdn>."""
    return (
        f"[{EXTENSION_SECTION}]\n"
        "extendedKeyUsage = serverAuth , clientAuth\n"
        f"subjectAltName = DNS:{fqdn}\n"
    )


def write_extension_config(path: Path, fqdn: str) -> Path:
    path.write_text(render_extension_config(fqdn))
    return path


def parse_extension_config(text: str, section: str = EXTENSION_SECTION) -> SigningExtensions:
    """Parse extendedKeyUsage and subjectAltName from an extension config.

    Raises:
        ValueError: If the section is missing or an entry is not supported
    """
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str
    parser.read_string(text)

    if not parser.has_section(section):
        raise ValueError(f"extension section [{section}] not found")

    extensions = SigningExtensions()

    for usage in _split_list(parser.get(section, "extendedKeyUsage", fallback="")):
        if usage not in EXTENDED_KEY_USAGES:
            raise ValueError(f"unsupported extendedKeyUsage: {usage}")
        extensions.extended_key_usage.append(EXTENDED_KEY_USAGES[usage])

    for entry in _split_list(parser.get(section, "subjectAltName", fallback="")):
        kind, _, value = entry.partition(":")
        if kind.strip() != "DNS" or not value.strip():
            raise ValueError(f"unsupported subjectAltName entry: {entry}")
        extensions.dns_names.append(value.strip())

    return extensions


def read_extension_config(path: Path) -> SigningExtensions:
    return parse_extension_config(path.read_text())


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]
