"""``require``/``revert`` inside loops."""

from __future__ import annotations

from ..browser import closest_ancestor_of_type
from ..context import WorkspaceContext
from ..nodes import NodeType
from .base import DetectorName, IssueDetector, IssueSeverity

LOOP_TYPES = (NodeType.FOR_STATEMENT, NodeType.WHILE_STATEMENT, NodeType.DO_WHILE_STATEMENT)


class RevertsAndRequiresInLoopsDetector(IssueDetector):
    def detect(self, context: WorkspaceContext) -> bool:
        candidates = [
            identifier for identifier in context.identifiers()
            if identifier.name in ("require", "revert")
        ]
        candidates.extend(context.nodes_of_type(NodeType.REVERT_STATEMENT))

        for node in candidates:
            if any(closest_ancestor_of_type(context, node, loop) for loop in LOOP_TYPES):
                self.capture(context, node)
        return bool(self._instances)

    def severity(self) -> IssueSeverity:
        return IssueSeverity.LOW

    def title(self) -> str:
        return "Loop contains `require`/`revert` statements"

    def description(self) -> str:
        return (
            "Avoid `require` / `revert` statements in a loop because a single bad item can cause "
            "the whole transaction to fail. It's better to forgive on fail and return failed "
            "elements post processing of the loop"
        )

    def name(self) -> str:
        return DetectorName.REVERTS_AND_REQUIRES_IN_LOOPS.value
