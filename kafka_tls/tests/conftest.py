"""Test fixtures for kafka_tls tests."""

from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.x509.oid import ExtendedKeyUsageOID

from kafka_tls.lib.cert_utils import build_csr, generate_private_key
from kafka_tls.lib.certificate_builder import CertificateBuilder
from kafka_tls.lib.config import DistinguishedName, TLSConfig
from kafka_tls.lib.ext_config import SigningExtensions

HOST_FQDN = "broker1.example.com"


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """Return temporary base directory for truststore/ and keystore/."""
    return tmp_path


@pytest.fixture
def tls_config() -> TLSConfig:
    """Return test configuration with a short validity period."""
    return TLSConfig(validity_days=30)


@pytest.fixture
def csr_config() -> TLSConfig:
    """Return test configuration for the CSR-first workflow."""
    return TLSConfig(validity_days=30, mode="csr")


@pytest.fixture
def ca_key() -> RSAPrivateKey:
    """Generate RSA private key for the CA."""
    return generate_private_key(key_size=2048)


@pytest.fixture
def ca_dn() -> DistinguishedName:
    """Return test CA distinguished name."""
    return DistinguishedName(
        country="US",
        state="CA",
        locality="Atlantis",
        organization="CONFLUENT",
        common_name="certificate-authority",
    )


@pytest.fixture
def ca_cert(ca_key: RSAPrivateKey, ca_dn: DistinguishedName) -> x509.Certificate:
    """Generate self-signed CA certificate."""
    return CertificateBuilder.build_ca(
        subject_dn=ca_dn,
        private_key=ca_key,
        validity_days=30,
    )


@pytest.fixture
def host_key() -> RSAPrivateKey:
    """Generate RSA private key for the host."""
    return generate_private_key(key_size=2048)


@pytest.fixture
def host_dn() -> DistinguishedName:
    """Return test host distinguished name."""
    return DistinguishedName(
        country="US",
        state="CA",
        locality="Atlantis",
        organization="CONFLUENT",
        common_name=HOST_FQDN,
    )


@pytest.fixture
def host_csr(
    host_key: RSAPrivateKey,
    host_dn: DistinguishedName,
) -> x509.CertificateSigningRequest:
    """Generate host CSR without extension requests."""
    return build_csr(host_dn.to_x509_name(), host_key)


@pytest.fixture
def signing_extensions() -> SigningExtensions:
    """Return server/client auth usages with SAN for the host."""
    return SigningExtensions(
        extended_key_usage=[ExtendedKeyUsageOID.SERVER_AUTH, ExtendedKeyUsageOID.CLIENT_AUTH],
        dns_names=[HOST_FQDN],
    )


@pytest.fixture
def host_cert(
    host_csr: x509.CertificateSigningRequest,
    ca_cert: x509.Certificate,
    ca_key: RSAPrivateKey,
    signing_extensions: SigningExtensions,
) -> x509.Certificate:
    """Generate host certificate signed by the CA."""
    return CertificateBuilder.build_host_certificate(
        csr=host_csr,
        ca_cert=ca_cert,
        ca_key=ca_key,
        validity_days=30,
        extensions=signing_extensions,
        serial_number=1000,
    )
