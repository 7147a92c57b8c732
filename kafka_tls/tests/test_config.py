"""Tests for TLSConfig, load_config and ArtifactPaths."""

import json
from pathlib import Path

import pytest

from kafka_tls.lib.config import ArtifactPaths, TLSConfig, load_config
from kafka_tls.lib.errors import UsageError


class TestTLSConfig:
    """Tests for TLSConfig defaults and overrides."""

    def test_defaults(self) -> None:
        """Defaults match the broker provisioning identity and store settings."""
        config = TLSConfig()

        assert (config.country, config.state, config.locality, config.organization) == (
            "US",
            "CA",
            "Atlantis",
            "CONFLUENT",
        )
        assert config.validity_days == 3650
        assert config.store_password == "secret"
        assert config.truststore_alias == "CARoot"
        assert config.keystore_alias == "localhost"
        assert config.mode == "keystore"

    def test_with_overrides_ignores_none(self) -> None:
        """None overrides keep the current value."""
        config = TLSConfig().with_overrides(mode="csr", store_password=None)

        assert config.mode == "csr"
        assert config.store_password == "secret"

    def test_unknown_mode_raises(self) -> None:
        """Only keystore and csr modes exist."""
        with pytest.raises(UsageError, match="unknown mode"):
            TLSConfig(mode="pkcs7")

    def test_empty_password_raises(self) -> None:
        """Stores must be password-protected."""
        with pytest.raises(UsageError, match="store_password"):
            TLSConfig(store_password="")


class TestLoadConfig:
    """Tests for load_config()."""

    def test_loads_fields(self, tmp_path: Path) -> None:
        """JSON keys map onto TLSConfig fields."""
        path = tmp_path / "tls.json"
        path.write_text(json.dumps({"organization": "ACME", "validity_days": 365}))

        config = load_config(path)

        assert config.organization == "ACME"
        assert config.validity_days == 365
        assert config.country == "US"

    def test_unknown_keys_raise(self, tmp_path: Path) -> None:
        """Typos in the config file are reported."""
        path = tmp_path / "tls.json"
        path.write_text(json.dumps({"organisation": "ACME"}))

        with pytest.raises(UsageError, match="organisation"):
            load_config(path)

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """Missing config file is a usage error."""
        with pytest.raises(UsageError, match="not found"):
            load_config(tmp_path / "missing.json")

    def test_non_object_raises(self, tmp_path: Path) -> None:
        """Top-level JSON must be an object."""
        path = tmp_path / "tls.json"
        path.write_text("[]")

        with pytest.raises(UsageError, match="JSON object"):
            load_config(path)


class TestArtifactPaths:
    """Tests for ArtifactPaths.for_fqdn()."""

    def test_layout(self, tmp_path: Path) -> None:
        """Paths follow the truststore/ and keystore/ layout."""
        paths = ArtifactPaths.for_fqdn(tmp_path, TLSConfig(), "broker1.example.com")

        assert paths.ca_key == tmp_path / "truststore" / "ca-key.pem"
        assert paths.ca_cert == tmp_path / "truststore" / "ca.crt"
        assert paths.ca_serial == tmp_path / "truststore" / "ca.srl"
        assert paths.truststore == tmp_path / "truststore" / "truststore.jks"
        assert paths.private_key == tmp_path / "keystore" / "broker1.example.com-key.pem"
        assert paths.signed_cert == tmp_path / "keystore" / "broker1.example.com-signed.crt"
        assert paths.csr == tmp_path / "keystore" / "broker1.example.com.csr"
        assert paths.keystore == tmp_path / "keystore" / "broker1.example.com-keystore.jks"
        assert paths.ext_config == tmp_path / "keystore" / "broker1.example.com.cnf"

    def test_bundle_checked_only_in_csr_mode(self, tmp_path: Path) -> None:
        """The .p12 bundle is an output of the CSR-first workflow only."""
        paths = ArtifactPaths.for_fqdn(tmp_path, TLSConfig(), "broker1.example.com")

        assert paths.pkcs12_bundle not in paths.host_outputs("keystore")
        assert paths.pkcs12_bundle in paths.host_outputs("csr")


class TestConfigValidation:
    """Type checks and unreadable config files."""

    def test_string_boolean_raises(self, tmp_path: Path) -> None:
        """JSON strings are not accepted for boolean fields."""
        path = tmp_path / "tls.json"
        path.write_text(json.dumps({"cleanup_on_failure": "no"}))

        with pytest.raises(UsageError, match="cleanup_on_failure must be bool"):
            load_config(path)

    def test_boolean_for_int_field_raises(self) -> None:
        """true is not a number of days."""
        with pytest.raises(UsageError, match="validity_days must be int"):
            TLSConfig(validity_days=True)

    def test_string_for_int_field_raises(self, tmp_path: Path) -> None:
        """Numeric fields must be JSON numbers."""
        path = tmp_path / "tls.json"
        path.write_text(json.dumps({"validity_days": "365"}))

        with pytest.raises(UsageError, match="validity_days must be int"):
            load_config(path)

    def test_directory_path_raises(self, tmp_path: Path) -> None:
        """A directory given as config file is a usage error."""
        with pytest.raises(UsageError, match="cannot be read"):
            load_config(tmp_path)

    def test_non_utf8_file_raises(self, tmp_path: Path) -> None:
        """Binary content is reported, not raised as a decode error."""
        path = tmp_path / "tls.json"
        path.write_bytes(b"\xff\xfe\x00{")

        with pytest.raises(UsageError):
            load_config(path)
