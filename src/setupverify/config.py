"""Run configuration: tool locations, CA bundle, timeouts, known strings.

Configuration is an optional YAML file layered over built-in defaults::

    ca_bundle: /etc/ssl/certs/ca-certificates.crt
    head_prefix: setup_
    timeout: 3600
    trailer_window: 65536
    tools:
      signature: osslsigncode
      extractor: innoextract
    known:
      subjects:
        gog: |
          /C=PL/L=Warsaw/O=GOG Sp. z o.o./CN=GOG Sp. z o.o.
      issuers:
        digicert:
          - /C=US/O=DigiCert Inc/OU=www.digicert.com/CN=DigiCert SHA2 Assured ID Code Signing CA
      serials: {}

Known strings are organised in named groups, each either a YAML list or a
newline-delimited block. Groups from the file replace built-in groups of the
same name and add to the rest; every category is flattened into a single
exact-match set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import yaml

from setupverify.core.signature.models import KnownStrings
from setupverify.core.tools import EXTRACTOR_TOOL, SIGNATURE_TOOL
from setupverify.core.trailer.parser import DEFAULT_WINDOW
from setupverify.discovery import DEFAULT_PREFIX
from setupverify.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 3600.0

# System CA bundles, most common first.
CA_BUNDLE_CANDIDATES: tuple[str, ...] = (
    "/etc/ssl/certs/ca-certificates.crt",
    "/etc/pki/tls/certs/ca-bundle.crt",
    "/etc/ssl/ca-bundle.pem",
    "/etc/ssl/cert.pem",
    "/usr/local/etc/openssl/cert.pem",
)

DEFAULT_SUBJECTS: dict[str, str] = {
    "gog": """
        /C=PL/L=Warsaw/O=GOG Sp. z o.o./CN=GOG Sp. z o.o.
        /C=PL/ST=Mazowieckie/L=Warsaw/O=GOG Sp. z o.o./CN=GOG Sp. z o.o.
        /C=PL/ST=mazowieckie/L=Warszawa/O=GOG sp. z o.o./CN=GOG sp. z o.o.
    """,
    "timestamping": """
        /C=US/O=DigiCert, Inc./CN=DigiCert Timestamp 2021
        /C=US/O=DigiCert, Inc./CN=DigiCert Timestamp 2022 - 2
        /C=US/O=DigiCert, Inc./CN=DigiCert Timestamp 2023
    """,
}

DEFAULT_ISSUERS: dict[str, str] = {
    "digicert": """
        /C=US/O=DigiCert Inc/OU=www.digicert.com/CN=DigiCert Assured ID Root CA
        /C=US/O=DigiCert Inc/OU=www.digicert.com/CN=DigiCert SHA2 Assured ID Code Signing CA
        /C=US/O=DigiCert Inc/OU=www.digicert.com/CN=DigiCert SHA2 Assured ID Timestamping CA
        /C=US/O=DigiCert Inc/OU=www.digicert.com/CN=DigiCert Trusted Root G4
        /C=US/O=DigiCert, Inc./CN=DigiCert Trusted G4 Code Signing RSA4096 SHA384 2021 CA1
        /C=US/O=DigiCert, Inc./CN=DigiCert Trusted G4 RSA4096 SHA256 TimeStamping CA
    """,
    "symantec": """
        /C=US/O=Symantec Corporation/OU=Symantec Trust Network/CN=Symantec Class 3 SHA256 Code Signing CA
        /C=US/O=Symantec Corporation/CN=Symantec Time Stamping Services CA - G2
    """,
}

DEFAULT_SERIALS: dict[str, str] = {}


def default_ca_bundle(is_file: Callable[[Path], bool] = Path.is_file) -> Path | None:
    """Return the first system CA bundle that exists, or None."""
    for candidate in CA_BUNDLE_CANDIDATES:
        path = Path(candidate)
        if is_file(path):
            return path
    return None


@dataclass
class Config:
    """Resolved configuration for one run.

    Attributes:
        ca_bundle: CA bundle passed to the signature verifier (None = let
            the verifier use its own default).
        head_prefix: File name prefix identifying installer heads.
        timeout: Seconds allowed per external tool call (None = no limit).
        trailer_window: Bytes from the end of a head searched for the
            checksum trailer.
        signature_tool: Signature verifier executable.
        extractor_tool: Extractor executable.
        known: Known certificate field values (display only).
    """

    ca_bundle: Path | None = None
    head_prefix: str = DEFAULT_PREFIX
    timeout: float | None = DEFAULT_TIMEOUT
    trailer_window: int = DEFAULT_WINDOW
    signature_tool: str = SIGNATURE_TOOL
    extractor_tool: str = EXTRACTOR_TOOL
    known: KnownStrings = field(
        default_factory=lambda: KnownStrings.from_groups(
            DEFAULT_SUBJECTS, DEFAULT_ISSUERS, DEFAULT_SERIALS
        )
    )


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def _merge_groups(defaults: dict[str, str], overrides: Any, category: str) -> dict[str, Any]:
    if overrides is None:
        return dict(defaults)
    if isinstance(overrides, (str, list)):
        overrides = {"config": overrides}
    if not isinstance(overrides, dict):
        raise ConfigError(f"known.{category} must be a mapping of groups")
    merged: dict[str, Any] = dict(defaults)
    for group, block in overrides.items():
        if block is None:
            merged.pop(group, None)
            continue
        if isinstance(block, list) and all(isinstance(item, str) for item in block):
            merged[group] = block
        elif isinstance(block, str):
            merged[group] = block
        else:
            raise ConfigError(
                f"known.{category}.{group} must be a list of strings or a text block"
            )
    return merged


def _positive_number(value: Any, key: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"'{key}' must be a number, got {value!r}")
    if number <= 0:
        raise ConfigError(f"'{key}' must be positive, got {value!r}")
    return number


def config_from_dict(data: dict[str, Any]) -> Config:
    """Build a Config from parsed YAML, applying defaults for missing keys."""
    if not isinstance(data, dict):
        raise ConfigError("configuration root must be a mapping")

    config = Config()
    if data.get("ca_bundle"):
        config.ca_bundle = Path(str(data["ca_bundle"])).expanduser()
    else:
        config.ca_bundle = default_ca_bundle()
    if data.get("head_prefix") is not None:
        config.head_prefix = str(data["head_prefix"])
    if "timeout" in data:
        config.timeout = None if data["timeout"] is None else _positive_number(
            data["timeout"], "timeout"
        )
    if data.get("trailer_window") is not None:
        config.trailer_window = int(_positive_number(data["trailer_window"], "trailer_window"))

    tools = _section(data, "tools")
    config.signature_tool = str(tools.get("signature") or SIGNATURE_TOOL)
    config.extractor_tool = str(tools.get("extractor") or EXTRACTOR_TOOL)

    known = _section(data, "known")
    config.known = KnownStrings.from_groups(
        _merge_groups(DEFAULT_SUBJECTS, known.get("subjects"), "subjects"),
        _merge_groups(DEFAULT_ISSUERS, known.get("issuers"), "issuers"),
        _merge_groups(DEFAULT_SERIALS, known.get("serials"), "serials"),
    )
    return config


def load_config(path: Path | None = None) -> Config:
    """Load configuration from ``path`` (or defaults when None).

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    if path is None:
        return config_from_dict({})
    try:
        raw = Path(path).read_text(encoding="utf-8")
        data = yaml.safe_load(raw)
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}")
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}")
    logger.debug("Loaded configuration from %s", path)
    return config_from_dict(data or {})
