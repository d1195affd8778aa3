"""Detector engine: base contract, registry and the shipped detectors."""

from .base import DetectorName, InstanceKey, IssueDetector, IssueSeverity, instance_key
from .blame import BlameCoverage, MissedInstance, check_blame_coverage
from .push_zero_opcode import PushZeroOpcodeDetector
from .registry import (
    detector_metadata,
    get_all_detector_names,
    get_all_issue_detectors,
    get_issue_detector_by_name,
    select_detectors,
)
from .require_with_string import RequireWithStringDetector
from .reverts_and_requires_in_loops import RevertsAndRequiresInLoopsDetector
from .unspecific_solidity_pragma import UnspecificSolidityPragmaDetector
from .zero_address_check import ZeroAddressCheckDetector

__all__ = [
    "BlameCoverage",
    "DetectorName",
    "InstanceKey",
    "IssueDetector",
    "IssueSeverity",
    "MissedInstance",
    "PushZeroOpcodeDetector",
    "RequireWithStringDetector",
    "RevertsAndRequiresInLoopsDetector",
    "UnspecificSolidityPragmaDetector",
    "ZeroAddressCheckDetector",
    "check_blame_coverage",
    "detector_metadata",
    "get_all_detector_names",
    "get_all_issue_detectors",
    "get_issue_detector_by_name",
    "instance_key",
    "select_detectors",
]
