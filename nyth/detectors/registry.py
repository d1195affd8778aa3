"""Explicit table of runnable detectors."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Optional

from ..errors import UnknownDetectorError
from .base import DetectorName, IssueDetector
from .push_zero_opcode import PushZeroOpcodeDetector
from .require_with_string import RequireWithStringDetector
from .reverts_and_requires_in_loops import RevertsAndRequiresInLoopsDetector
from .unspecific_solidity_pragma import UnspecificSolidityPragmaDetector
from .zero_address_check import ZeroAddressCheckDetector

# Order here is the order detectors run and appear in reports.
DETECTOR_FACTORIES: Dict[DetectorName, Callable[[], IssueDetector]] = {
    DetectorName.UNSPECIFIC_SOLIDITY_PRAGMA: UnspecificSolidityPragmaDetector,
    DetectorName.ZERO_ADDRESS_CHECK: ZeroAddressCheckDetector,
    DetectorName.REQUIRE_WITH_STRING: RequireWithStringDetector,
    DetectorName.PUSH_ZERO_OPCODE: PushZeroOpcodeDetector,
    DetectorName.REVERTS_AND_REQUIRES_IN_LOOPS: RevertsAndRequiresInLoopsDetector,
}


def get_all_issue_detectors() -> List[IssueDetector]:
    return [factory() for factory in DETECTOR_FACTORIES.values()]


def get_all_detector_names() -> List[str]:
    return [name.value for name in DETECTOR_FACTORIES]


def get_issue_detector_by_name(name: str) -> IssueDetector:
    """Build a fresh detector; unknown names (and ``undecided``) raise."""
    try:
        key = DetectorName(name)
    except ValueError:
        raise UnknownDetectorError(name) from None
    factory = DETECTOR_FACTORIES.get(key)
    if factory is None:
        raise UnknownDetectorError(name)
    return factory()


def select_detectors(
    include: Optional[Iterable[str]] = None,
    exclude: Optional[Iterable[str]] = None,
) -> List[IssueDetector]:
    """Detectors named in *include* (all when empty) minus *exclude*.

    Every name is validated, excluded ones included.
    """
    excluded = {get_issue_detector_by_name(name).name() for name in exclude or ()}
    included = list(include or ())
    detectors = (
        [get_issue_detector_by_name(name) for name in included]
        if included
        else get_all_issue_detectors()
    )
    return [detector for detector in detectors if detector.name() not in excluded]


def detector_metadata(detectors: Optional[Iterable[IssueDetector]] = None) -> List[Dict[str, str]]:
    """Name, title, severity and description of each detector, for tooling."""
    if detectors is None:
        detectors = get_all_issue_detectors()
    return [
        {
            "name": detector.name(),
            "title": detector.title(),
            "severity": detector.severity().label,
            "description": detector.description(),
        }
        for detector in detectors
    ]
