"""Tests for YAML configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from setupverify.config import (
    DEFAULT_TIMEOUT,
    config_from_dict,
    default_ca_bundle,
    load_config,
)
from setupverify.core.trailer import MARKER
from setupverify.exceptions import ConfigError

GOG_SUBJECT = "/C=PL/L=Warsaw/O=GOG Sp. z o.o./CN=GOG Sp. z o.o."
SYMANTEC_CA = "/C=US/O=Symantec Corporation/CN=Symantec Time Stamping Services CA - G2"


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "setupverify.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    def test_no_file(self) -> None:
        config = load_config(None)
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.head_prefix == "setup_"
        assert config.signature_tool == "osslsigncode"
        assert config.extractor_tool == "innoextract"
        assert config.known.is_known("Subject", GOG_SUBJECT)
        assert config.known.is_known("issuer", SYMANTEC_CA)

    def test_empty_file(self, tmp_path: Path) -> None:
        config = load_config(_write(tmp_path, ""))
        assert config.timeout == DEFAULT_TIMEOUT

    def test_ca_bundle_probe(self) -> None:
        found = default_ca_bundle(is_file=lambda p: p.name == "cert.pem")
        assert found == Path("/etc/ssl/cert.pem")
        assert default_ca_bundle(is_file=lambda p: False) is None

    def test_marker_constant(self) -> None:
        assert MARKER == b"#GOGCRCSTRING"


class TestOverrides:
    def test_scalar_values(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "ca_bundle: /opt/ca.pem\n"
            "head_prefix: install_\n"
            "timeout: 120\n"
            "trailer_window: 4096\n"
            "tools:\n"
            "  signature: /opt/bin/osslsigncode\n"
            "  extractor: innoextract-1.9\n",
        )
        config = load_config(path)
        assert config.ca_bundle == Path("/opt/ca.pem")
        assert config.head_prefix == "install_"
        assert config.timeout == 120.0
        assert config.trailer_window == 4096
        assert config.signature_tool == "/opt/bin/osslsigncode"
        assert config.extractor_tool == "innoextract-1.9"

    def test_null_timeout_disables_limit(self) -> None:
        assert config_from_dict({"timeout": None}).timeout is None

    def test_new_group_adds(self) -> None:
        config = config_from_dict({"known": {"subjects": {"acme": ["/CN=Acme"]}}})
        assert config.known.is_known("Subject", "/CN=Acme")
        assert config.known.is_known("Subject", GOG_SUBJECT)

    def test_same_group_replaces(self) -> None:
        config = config_from_dict({"known": {"subjects": {"gog": "/CN=Other\n"}}})
        assert config.known.is_known("Subject", "/CN=Other")
        assert not config.known.is_known("Subject", GOG_SUBJECT)

    def test_null_group_removes(self) -> None:
        config = config_from_dict({"known": {"issuers": {"symantec": None}}})
        assert not config.known.is_known("Issuer", SYMANTEC_CA)

    def test_block_without_groups(self) -> None:
        config = config_from_dict({"known": {"serials": "0a1b\n  0c2d  \n\n"}})
        assert config.known.serials == frozenset({"0a1b", "0c2d"})


class TestErrors:
    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(_write(tmp_path, "known: [unclosed\n"))

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(tmp_path / "absent.yaml")

    def test_root_not_mapping(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(_write(tmp_path, "- a\n- b\n"))

    @pytest.mark.parametrize("value", ["soon", 0, -5])
    def test_bad_timeout(self, value: object) -> None:
        with pytest.raises(ConfigError):
            config_from_dict({"timeout": value})

    def test_bad_group_type(self) -> None:
        with pytest.raises(ConfigError, match="known.subjects.gog"):
            config_from_dict({"known": {"subjects": {"gog": 42}}})

    def test_bad_section_type(self) -> None:
        with pytest.raises(ConfigError, match="'tools' must be a mapping"):
            config_from_dict({"tools": "osslsigncode"})
