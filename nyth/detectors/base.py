"""Detector contract: severity, instance capture, blame coverage."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Optional, Union

from ..context import WorkspaceContext
from ..location import source_line
from ..nodes import AstNode
from ..visitor import node_id_of

if TYPE_CHECKING:
    from .blame import BlameCoverage

logger = logging.getLogger(__name__)


class IssueSeverity(str, Enum):
    NC = "nc"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def label(self) -> str:
        return _SEVERITY_LABELS[self]

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __str__(self) -> str:
        return self.label


_SEVERITY_ORDER = (
    IssueSeverity.NC,
    IssueSeverity.LOW,
    IssueSeverity.MEDIUM,
    IssueSeverity.HIGH,
    IssueSeverity.CRITICAL,
)

_SEVERITY_LABELS = {
    IssueSeverity.NC: "NC (Non Critical)",
    IssueSeverity.LOW: "Low",
    IssueSeverity.MEDIUM: "Medium",
    IssueSeverity.HIGH: "High",
    IssueSeverity.CRITICAL: "Critical",
}


class DetectorName(str, Enum):
    """Kebab-case names of the registered detectors."""

    PUSH_ZERO_OPCODE = "push-zero-opcode"
    REVERTS_AND_REQUIRES_IN_LOOPS = "reverts-and-requires-in-loops"
    ZERO_ADDRESS_CHECK = "zero-address-check"
    UNSPECIFIC_SOLIDITY_PRAGMA = "unspecific-solidity-pragma"
    REQUIRE_WITH_STRING = "require-with-string"
    # Placeholder for detectors that have not been given a name yet; never runnable.
    UNDECIDED = "undecided"


@dataclass(frozen=True, order=True)
class InstanceKey:
    """Finding key: file path, 1-based line (0 when unknown), ``offset:length``."""

    file_path: str
    line: int
    src: str


def instance_key(context: WorkspaceContext, node: Union[AstNode, int]) -> Optional[InstanceKey]:
    """Derive the finding key for *node*; None if it has no owning unit."""
    node_id = node_id_of(node)
    registered = context.get(node_id)
    unit = context.source_unit_of(node_id)
    if registered is None or unit is None:
        return None
    src = registered.src
    line = source_line(unit, src) if src is not None else None
    return InstanceKey(
        file_path=unit.absolute_path or "",
        line=line or 0,
        src=src.range if src is not None else "",
    )


class IssueDetector(ABC):
    """Base class for every analysis pass.

    Subclasses implement :meth:`detect` and call :meth:`capture` for each
    offending node.  Each detector owns its instance map, so detectors can
    run side by side over the same read-only context.
    """

    def __init__(self) -> None:
        self._instances: Dict[InstanceKey, int] = {}

    @abstractmethod
    def detect(self, context: WorkspaceContext) -> bool:
        """Inspect *context*; return True when at least one instance was found."""

    def severity(self) -> IssueSeverity:
        return IssueSeverity.MEDIUM

    @abstractmethod
    def title(self) -> str:
        """One-line summary shown in reports."""

    @abstractmethod
    def description(self) -> str:
        """What the finding means and how to fix it."""

    @abstractmethod
    def name(self) -> str:
        """Kebab-case registry name, one of :class:`DetectorName`."""

    def instances(self) -> Dict[InstanceKey, int]:
        """Copy of the findings, ordered by key."""
        return dict(sorted(self._instances.items()))

    def capture(self, context: WorkspaceContext, node: Union[AstNode, int]) -> bool:
        """Record *node* as an instance; capturing the same key twice is a no-op."""
        key = instance_key(context, node)
        if key is None:
            logger.debug("%s: node %r has no source unit, not captured", self.name(), node)
            return False
        self._instances[key] = node_id_of(node)
        return True

    def blame_coverage(self, fixture: Union[str, Path]) -> "BlameCoverage":
        from .blame import check_blame_coverage

        return check_blame_coverage(self, fixture)

    def verify_blame_coverage(self, fixture: Union[str, Path]) -> bool:
        return self.blame_coverage(fixture).covered

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name()}>"
