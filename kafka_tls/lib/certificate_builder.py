"""Certificate builder for X.509 certificate construction."""

from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from .cert_utils import (
    extract_csr_public_key,
    extract_csr_subject,
    generate_serial_number,
    validate_csr_signature,
)
from .config import DistinguishedName
from .ext_config import SigningExtensions


class CertificateBuilder:
    """Builds the CA certificate and the host certificates it signs."""

    @staticmethod
    def build_ca(
        subject_dn: DistinguishedName,
        private_key: RSAPrivateKey,
        validity_days: int,
    ) -> x509.Certificate:
        """Build self-signed CA certificate.

        Args:
            subject_dn: Distinguished name for certificate subject and issuer
            private_key: RSA private key for signing
            validity_days: Certificate validity period in days

        Returns:
            Self-signed X.509 certificate with CA extensions
        """
        subject = subject_dn.to_x509_name()
        not_before = datetime.now(timezone.utc)
        not_after = not_before + timedelta(days=validity_days)
        public_key = private_key.public_key()

        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(subject)
            .public_key(public_key)
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.BasicConstraints(ca=True, path_length=None),
                critical=True,
            )
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(public_key),
                critical=False,
            )
            .add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(public_key),
                critical=False,
            )
        )

        return builder.sign(private_key, hashes.SHA256())

    @staticmethod
    def build_self_signed_host(
        subject_dn: DistinguishedName,
        private_key: RSAPrivateKey,
        validity_days: int,
    ) -> x509.Certificate:
        """Build the placeholder self-signed certificate stored with a fresh key entry.

        The certificate carries SAN DNS:<common name> and is replaced by the
        CA-signed certificate once the signing request has been fulfilled.
        """
        subject = subject_dn.to_x509_name()
        not_before = datetime.now(timezone.utc)
        not_after = not_before + timedelta(days=validity_days)

        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(subject)
            .public_key(private_key.public_key())
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.SubjectAlternativeName([x509.DNSName(subject_dn.common_name)]),
                critical=False,
            )
            .add_extension(
                x509.SubjectKeyIdentifier.from_public_key(private_key.public_key()),
                critical=False,
            )
        )

        return builder.sign(private_key, hashes.SHA256())

    @staticmethod
    def build_host_certificate(
        csr: x509.CertificateSigningRequest,
        ca_cert: x509.Certificate,
        ca_key: RSAPrivateKey,
        validity_days: int,
        extensions: SigningExtensions,
        serial_number: int,
    ) -> x509.Certificate:
        """Build host certificate from CSR, signed by the CA.

        Only the extensions from the signing extension config are applied;
        extension requests carried inside the CSR are ignored.

        Args:
            csr: Certificate signing request from the host
            ca_cert: CA certificate (issuer)
            ca_key: CA private key for signing
            validity_days: Certificate validity period in days
            extensions: Extended key usages and SAN entries to embed
            serial_number: Serial allocated from the CA serial file

        Returns:
            X.509 end-entity certificate signed by the CA

        Raises:
            ValueError: If CSR signature is invalid
        """
        if not validate_csr_signature(csr):
            raise ValueError("CSR signature validation failed")

        subject = extract_csr_subject(csr)
        public_key = extract_csr_public_key(csr)

        not_before = datetime.now(timezone.utc)
        not_after = not_before + timedelta(days=validity_days)

        builder = (
            x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(ca_cert.subject)
            .public_key(public_key)
            .serial_number(serial_number)
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.AuthorityKeyIdentifier.from_issuer_public_key(ca_key.public_key()),
                critical=False,
            )
        )

        if extensions.extended_key_usage:
            builder = builder.add_extension(
                x509.ExtendedKeyUsage(extensions.extended_key_usage),
                critical=False,
            )
        if extensions.dns_names:
            builder = builder.add_extension(
                x509.SubjectAlternativeName(
                    [x509.DNSName(name) for name in extensions.dns_names]
                ),
                critical=False,
            )

        return builder.sign(ca_key, hashes.SHA256())
