"""Run detectors over a workspace and bucket their findings by severity."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .browser import peek_source
from .context import WorkspaceContext
from .detectors.base import IssueDetector, IssueSeverity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Instance:
    file_path: str
    line: int
    src: str
    node_id: int
    snippet: Optional[str] = None


@dataclass
class Issue:
    name: str
    title: str
    description: str
    severity: IssueSeverity
    instances: List[Instance] = field(default_factory=list)


@dataclass(frozen=True)
class DetectorFailure:
    name: str
    error: str


@dataclass
class Report:
    criticals: List[Issue] = field(default_factory=list)
    highs: List[Issue] = field(default_factory=list)
    mediums: List[Issue] = field(default_factory=list)
    lows: List[Issue] = field(default_factory=list)
    ncs: List[Issue] = field(default_factory=list)
    failures: List[DetectorFailure] = field(default_factory=list)

    def bucket(self, severity: IssueSeverity) -> List[Issue]:
        return {
            IssueSeverity.CRITICAL: self.criticals,
            IssueSeverity.HIGH: self.highs,
            IssueSeverity.MEDIUM: self.mediums,
            IssueSeverity.LOW: self.lows,
            IssueSeverity.NC: self.ncs,
        }[severity]

    def add(self, issue: Issue) -> None:
        self.bucket(issue.severity).append(issue)

    @property
    def issues(self) -> List[Issue]:
        """All issues, most severe bucket first."""
        return self.criticals + self.highs + self.mediums + self.lows + self.ncs

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    def summary(self) -> Dict[str, int]:
        return {
            severity.label: len(self.bucket(severity))
            for severity in sorted(IssueSeverity, key=lambda s: s.rank, reverse=True)
        }

    def to_dict(self) -> Dict[str, Any]:
        """Plain structure for external renderers."""

        def issue_dict(issue: Issue) -> Dict[str, Any]:
            data = asdict(issue)
            data["severity"] = issue.severity.value
            return data

        return {
            "critical_issues": [issue_dict(i) for i in self.criticals],
            "high_issues": [issue_dict(i) for i in self.highs],
            "medium_issues": [issue_dict(i) for i in self.mediums],
            "low_issues": [issue_dict(i) for i in self.lows],
            "nc_issues": [issue_dict(i) for i in self.ncs],
            "failures": [asdict(f) for f in self.failures],
        }


def issue_from_detector(detector: IssueDetector, context: WorkspaceContext) -> Issue:
    return Issue(
        name=detector.name(),
        title=detector.title(),
        description=detector.description(),
        severity=detector.severity(),
        instances=[
            Instance(key.file_path, key.line, key.src, node_id, peek_source(context, node_id))
            for key, node_id in detector.instances().items()
        ],
    )


def _run_one(
    detector: IssueDetector,
    context: WorkspaceContext,
) -> Tuple[Optional[Issue], Optional[DetectorFailure]]:
    try:
        found = detector.detect(context)
    except Exception as exc:
        logger.warning("Detector %s failed: %s", detector.name(), exc)
        return None, DetectorFailure(detector.name(), f"{type(exc).__name__}: {exc}")
    if not found:
        return None, None
    return issue_from_detector(detector, context), None


def run_detectors(
    context: WorkspaceContext,
    detectors: Sequence[IssueDetector],
    max_workers: Union[int, None] = 1,
) -> Report:
    """Run each detector and collect a :class:`Report`.

    A detector that raises is recorded in ``Report.failures`` and the
    remaining detectors still run.  With ``max_workers`` above 1 the
    detectors share a thread pool; results keep the input order either way.
    """
    if max_workers is not None and max_workers <= 1:
        outcomes = [_run_one(detector, context) for detector in detectors]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(lambda d: _run_one(d, context), detectors))

    report = Report()
    for issue, failure in outcomes:
        if failure is not None:
            report.failures.append(failure)
        elif issue is not None:
            report.add(issue)
    logger.info(
        "Ran %d detector(s): %d issue(s), %d failure(s)",
        len(detectors),
        len(report.issues),
        len(report.failures),
    )
    return report
