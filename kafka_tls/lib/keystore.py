"""PKCS12 keystore and trust store containers."""

from dataclasses import dataclass
from pathlib import Path

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.hazmat.primitives.serialization import pkcs12

from .cert_utils import public_keys_match, serialize_private_key


@dataclass
class KeyEntry:
    """Private key entry: key plus the certificate that carries its public half."""

    alias: str
    key: RSAPrivateKey
    certificate: x509.Certificate


class Keystore:
    """In-memory PKCS12 container keyed by alias.

    Holds at most one private key entry and any number of trusted certificate
    entries, which is all a broker or client keystore/trust store needs.

    A store without a key entry is written with the Java trusted-certificate
    attribute on every certificate bag. A store with a key entry is written with
    serialize_key_and_certificates, which cannot set that attribute, so Java
    sees CARoot only as part of the key entry's chain rather than as a
    separate trusted entry as keytool would create it.
    """

    def __init__(self) -> None:
        self.key_entry: KeyEntry | None = None
        self.trusted: dict[str, x509.Certificate] = {}

    @classmethod
    def load(cls, path: Path, password: bytes) -> "Keystore":
        """Load a PKCS12 file.

        Raises:
            ValueError: If the password is wrong, the data is not PKCS12, or
                the private key is not RSA
        """
        bundle = pkcs12.load_pkcs12(path.read_bytes(), password)
        store = cls()

        if bundle.key is not None:
            if not isinstance(bundle.key, RSAPrivateKey):
                raise ValueError("expected RSA private key in keystore")
            if bundle.cert is None:
                raise ValueError("keystore key entry has no certificate")
            store.key_entry = KeyEntry(
                alias=_alias(bundle.cert.friendly_name, "1"),
                key=bundle.key,
                certificate=bundle.cert.certificate,
            )

        elif bundle.cert is not None:
            store.trusted[_alias(bundle.cert.friendly_name, "1")] = bundle.cert.certificate

        for index, extra in enumerate(bundle.additional_certs, start=2):
            store.trusted[_alias(extra.friendly_name, str(index))] = extra.certificate

        return store

    def aliases(self) -> list[str]:
        names = [self.key_entry.alias] if self.key_entry else []
        return names + list(self.trusted)

    def set_key_entry(self, alias: str, key: RSAPrivateKey, certificate: x509.Certificate) -> None:
        """Store a new key pair under alias.

        Raises:
            ValueError: If alias is taken or certificate does not match key
        """
        if alias in self.aliases():
            raise ValueError(f"alias <{alias}> already exists")
        if self.key_entry is not None:
            raise ValueError("keystore already holds a private key entry")
        if not public_keys_match(key, certificate):
            raise ValueError("certificate public key does not match private key")
        self.key_entry = KeyEntry(alias=alias, key=key, certificate=certificate)

    def add_trusted_certificate(self, alias: str, certificate: x509.Certificate) -> None:
        """Import a trusted certificate under a new alias."""
        if alias in self.aliases():
            raise ValueError(f"alias <{alias}> already exists")
        self.trusted[alias] = certificate

    def import_certificate_reply(self, alias: str, certificate: x509.Certificate) -> None:
        """Replace the certificate of the key entry with a CA-signed reply.

        The reply must carry the entry's public key and be issued by one of
        the trusted certificates already in the store.

        Raises:
            ValueError: If the alias has no key, the keys differ, or no
                trusted issuer verifies the reply
        """
        if self.key_entry is None or self.key_entry.alias != alias:
            raise ValueError(f"alias <{alias}> has no private key entry")
        if not public_keys_match(self.key_entry.key, certificate):
            raise ValueError("public keys in reply and keystore don't match")
        if self.issuer_of(certificate) is None:
            raise ValueError("failed to establish chain from reply")
        self.key_entry.certificate = certificate

    def issuer_of(self, certificate: x509.Certificate) -> x509.Certificate | None:
        """Return the trusted certificate that signed certificate, if any."""
        for candidate in self.trusted.values():
            try:
                certificate.verify_directly_issued_by(candidate)
            except (ValueError, TypeError, InvalidSignature):
                continue
            return candidate
        return None

    def private_key_pem(self) -> bytes:
        """Export the entry's private key as unencrypted PKCS8 PEM."""
        if self.key_entry is None:
            raise ValueError("keystore has no private key entry")
        return serialize_private_key(self.key_entry.key)

    def to_bytes(self, password: bytes) -> bytes:
        """Serialize to PKCS12.

        A store without a key entry is written as a Java-compatible trust
        store so the certificates are trusted entries rather than loose bags.
        """
        encryption = serialization.BestAvailableEncryption(password)
        cas = [
            pkcs12.PKCS12Certificate(cert, alias.encode("utf-8"))
            for alias, cert in self.trusted.items()
        ]

        if self.key_entry is None:
            if not cas:
                raise ValueError("refusing to write an empty keystore")
            return pkcs12.serialize_java_truststore(cas, encryption)

        return pkcs12.serialize_key_and_certificates(
            name=self.key_entry.alias.encode("utf-8"),
            key=self.key_entry.key,
            cert=self.key_entry.certificate,
            cas=cas or None,
            encryption_algorithm=encryption,
        )

    def save(self, path: Path, password: bytes) -> Path:
        path.write_bytes(self.to_bytes(password))
        return path


def _alias(friendly_name: bytes | None, fallback: str) -> str:
    if friendly_name is None:
        return fallback
    return friendly_name.decode("utf-8")
