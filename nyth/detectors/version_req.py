"""Compiler version requirements as written in ``pragma solidity``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from ..errors import VersionRequirementError


class Op(str, Enum):
    EXACT = "="
    GREATER = ">"
    GREATER_EQ = ">="
    LESS = "<"
    LESS_EQ = "<="
    TILDE = "~"
    CARET = "^"
    WILDCARD = "*"


_COMPARATOR_RE = re.compile(
    r"""^\s*
    (?P<op>>=|<=|=|>|<|~|\^)?\s*
    v?(?P<major>\d+|[*xX])
    (?:\.(?P<minor>\d+|[*xX]))?
    (?:\.(?P<patch>\d+|[*xX]))?
    (?:-(?P<pre>[0-9A-Za-z.-]+))?
    \s*$""",
    re.VERBOSE,
)


def _number(text: Optional[str]) -> Optional[int]:
    if text is None or text in ("*", "x", "X"):
        return None
    return int(text)


@dataclass(frozen=True)
class Comparator:
    op: Op
    major: int
    minor: Optional[int] = None
    patch: Optional[int] = None
    pre: str = ""

    @classmethod
    def parse(cls, text: str) -> Optional["Comparator"]:
        """Parse one comparator; None for a bare ``*`` (matches everything)."""
        match = _COMPARATOR_RE.match(text)
        if not match:
            raise VersionRequirementError(f"invalid version comparator {text!r}")
        op_text, major = match.group("op"), match.group("major")
        minor, patch = match.group("minor"), match.group("patch")

        wildcard = any(part in ("*", "x", "X") for part in (major, minor, patch) if part)
        if major in ("*", "x", "X"):
            if op_text or minor or patch:
                raise VersionRequirementError(f"unexpected text after wildcard in {text!r}")
            return None
        if wildcard and op_text:
            raise VersionRequirementError(f"wildcard cannot follow an operator in {text!r}")

        op = Op(op_text) if op_text else (Op.WILDCARD if wildcard else Op.CARET)
        return cls(op, int(major), _number(minor), _number(patch), match.group("pre") or "")


@dataclass(frozen=True)
class VersionReq:
    comparators: Tuple[Comparator, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "VersionReq":
        """Parse a comma separated list of comparators.

        A comparator without an operator is a caret requirement, so
        ``0.8.19`` means ``^0.8.19``; pin exact versions with ``=``.
        """
        if not text or not text.strip():
            raise VersionRequirementError("empty version requirement")
        parts = text.split(",")
        comparators = [Comparator.parse(part) for part in parts]
        if None in comparators:
            if len(parts) > 1:
                raise VersionRequirementError(f"wildcard '*' must stand alone in {text!r}")
            return cls(())
        return cls(tuple(comparators))


def solidity_version_string(literals: Iterable[str]) -> str:
    """Join ``pragma solidity`` literals into a parseable requirement.

    solc splits ``pragma solidity 0.8.19;`` into ``["solidity", "0.8",
    ".19"]``.  A bare leading version is pinned with ``=``; a second range
    bound starting with ``<`` or ``=`` gets a separating comma.
    """
    version = ""
    for literal in literals:
        if literal == "solidity":
            continue
        if not version and "0." in literal:
            version += "="
        if len(version) > 5 and literal in ("<", "="):
            version += ","
        version += literal
    return version


def is_solidity_pragma(literals: Iterable[str]) -> bool:
    literals = tuple(literals)
    return bool(literals) and literals[0] == "solidity"
