"""``require``/``revert`` without a reason string."""

from __future__ import annotations

from ..context import WorkspaceContext
from .base import DetectorName, IssueDetector, IssueSeverity


class RequireWithStringDetector(IssueDetector):
    def detect(self, context: WorkspaceContext) -> bool:
        for identifier in context.identifiers():
            if identifier.argument_types is None:
                continue
            arity = len(identifier.argument_types)
            if (identifier.name == "revert" and arity == 0) or (
                identifier.name == "require" and arity == 1
            ):
                self.capture(context, identifier)
        return bool(self._instances)

    def severity(self) -> IssueSeverity:
        return IssueSeverity.NC

    def title(self) -> str:
        return "`require()` / `revert()` statements should have descriptive reason strings or custom errors"

    def description(self) -> str:
        return "Add a reason string or a custom error so failures can be told apart off-chain."

    def name(self) -> str:
        return DetectorName.REQUIRE_WITH_STRING.value
