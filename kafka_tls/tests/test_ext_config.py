"""Tests for the signing extension config."""

from pathlib import Path

import pytest
from cryptography.x509.oid import ExtendedKeyUsageOID

from kafka_tls.lib.ext_config import (
    parse_extension_config,
    read_extension_config,
    render_extension_config,
    write_extension_config,
)


def test_render_extension_config() -> None:
    """Rendered config declares server/client auth and the SAN."""
    assert render_extension_config("broker1.example.com") == (
        "[v3_ca]\n"
        "extendedKeyUsage = serverAuth , clientAuth\n"
        "subjectAltName = DNS:broker1.example.com\n"
    )


def test_written_config_reads_back(tmp_path: Path) -> None:
    """A written config parses to the usages and DNS name it declares."""
    path = write_extension_config(tmp_path / "broker1.example.com.cnf", "broker1.example.com")
    extensions = read_extension_config(path)

    assert extensions.extended_key_usage == [
        ExtendedKeyUsageOID.SERVER_AUTH,
        ExtendedKeyUsageOID.CLIENT_AUTH,
    ]
    assert extensions.dns_names == ["broker1.example.com"]


def test_parse_multiple_dns_names() -> None:
    """Comma-separated SAN entries are all kept."""
    extensions = parse_extension_config(
        "[v3_ca]\nsubjectAltName = DNS:a.example.com, DNS:b.example.com\n"
    )

    assert extensions.dns_names == ["a.example.com", "b.example.com"]
    assert extensions.extended_key_usage == []


def test_missing_section_raises() -> None:
    """Config without [v3_ca] is rejected."""
    with pytest.raises(ValueError, match="not found"):
        parse_extension_config("[other]\nsubjectAltName = DNS:a.example.com\n")


def test_unknown_usage_raises() -> None:
    """Unknown extendedKeyUsage names are rejected."""
    with pytest.raises(ValueError, match="unsupported extendedKeyUsage"):
        parse_extension_config("[v3_ca]\nextendedKeyUsage = anything\n")


def test_non_dns_san_raises() -> None:
    """Only DNS SAN entries are supported."""
    with pytest.raises(ValueError, match="unsupported subjectAltName"):
        parse_extension_config("[v3_ca]\nsubjectAltName = IP:10.0.0.1\n")
