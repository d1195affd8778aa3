"""Exception hierarchy for nyth."""

from __future__ import annotations


class NythError(Exception):
    """Base class for every error raised by nyth."""


class MalformedAst(NythError):
    """The ingestion payload is not a well-formed solc AST.

    Raised before any query can run; the workspace is not built.
    """

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        super().__init__(f"{message} (at {path})" if path else message)


class UnknownDetectorError(NythError, LookupError):
    """A detector name that is not in the registry was requested."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown detector '{name}'")


class VersionRequirementError(NythError, ValueError):
    """A pragma version requirement could not be parsed."""


class ConfigError(NythError):
    """The configuration file exists but cannot be used."""
