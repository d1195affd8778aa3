"""Fixture-driven self-check for detectors.

A Solidity fixture marks expected findings with a comment on the line above
them::

    // @nyth:blame(zero-address-check,push-zero-opcode)
    owner = newOwner;

Every detector named in the marker must report an instance on the next line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, List, Tuple, Union

if TYPE_CHECKING:
    from .base import IssueDetector

logger = logging.getLogger(__name__)

BLAME_MARKER = "@nyth:blame("


@dataclass(frozen=True)
class MissedInstance:
    file_path: str
    line: int
    source_line: str

    def __str__(self) -> str:
        return f"File {self.file_path}\nLine {self.line}: {self.source_line.strip()}"


@dataclass
class BlameCoverage:
    detector: str
    expected: List[Tuple[str, int]] = field(default_factory=list)
    missed: List[MissedInstance] = field(default_factory=list)

    @property
    def covered(self) -> bool:
        return not self.missed


def blamed_names(line: str) -> List[str]:
    """Detector names listed by a marker on *line*, or [] if there is none."""
    start = line.find(BLAME_MARKER)
    if start == -1:
        return []
    end = line.find(")", start + len(BLAME_MARKER))
    if end == -1:
        return []
    portion = line[start + len(BLAME_MARKER):end]
    return [name.strip() for name in portion.split(",") if name.strip()]


def expected_instances(fixture: Union[str, Path], detector_name: str) -> List[Tuple[str, int]]:
    """(file, line) pairs the fixture expects *detector_name* to report."""
    path = Path(fixture)
    lines = path.read_text(encoding="utf-8").splitlines()
    expected = []
    for index, line in enumerate(lines):
        if detector_name in blamed_names(line):
            # index is 0-based; the blamed line is the one after the marker
            expected.append((str(path), index + 2))
    return expected


def same_file(fixture_path: str, instance_path: str) -> bool:
    """True when *instance_path* names *fixture_path* by its trailing path components."""
    if not instance_path:
        return False
    tail = Path(instance_path).parts
    return Path(fixture_path).parts[-len(tail):] == tail


def check_blame_coverage(detector: "IssueDetector", fixture: Union[str, Path]) -> BlameCoverage:
    """Compare a detector's instances against the fixture's markers."""
    name = detector.name()
    expected = expected_instances(fixture, name)
    found = list(detector.instances())

    missed: List[MissedInstance] = []
    lines = Path(fixture).read_text(encoding="utf-8").splitlines() if expected else []
    for file_path, line in expected:
        if not any(key.line == line and same_file(file_path, key.file_path) for key in found):
            text = lines[line - 1] if line - 1 < len(lines) else ""
            missed.append(MissedInstance(file_path, line, text))

    if missed:
        logger.warning(
            "%s failed to capture %d blamed instance(s):\n%s",
            name,
            len(missed),
            "\n".join(str(item) for item in missed),
        )
    return BlameCoverage(detector=name, expected=expected, missed=missed)
