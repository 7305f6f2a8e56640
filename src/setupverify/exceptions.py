"""setupverify exception hierarchy.

All public exceptions inherit from SetupVerifyError, giving callers a single
base class to catch when they want to handle any setupverify-specific failure
without swallowing unrelated errors.

Per-installer problems (bad checksums, missing signatures, broken payloads)
are never raised: they are reported as ``CheckOutcome`` values so that one
broken installer cannot stop a run. The exceptions below are reserved for
conditions that make the whole run meaningless.
"""


class SetupVerifyError(Exception):
    """Base exception for all setupverify errors."""


class ConfigError(SetupVerifyError):
    """Raised when the configuration file cannot be read or is malformed.

    Covers unreadable paths, invalid YAML, and values of the wrong type
    (e.g. a known-string group that is neither a list nor a text block).
    """


class ToolNotFoundError(SetupVerifyError):
    """Raised when a required external tool is not installed.

    The message names the missing executable and where to obtain it.
    Raised before any installer is processed.
    """

    def __init__(self, tool: str, source: str) -> None:
        self.tool = tool
        self.source = source
        super().__init__(
            f"Required tool '{tool}' was not found on PATH.\n"
            f"Install it from: {source}"
        )


class TrailerError(SetupVerifyError):
    """Raised when an installer trailer is present but cannot be decoded.

    The checksum stage converts this into a ``malformed_manifest`` outcome.
    """
