"""Floating ``pragma solidity`` versions."""

from __future__ import annotations

from ..context import WorkspaceContext
from .base import DetectorName, IssueDetector, IssueSeverity
from .version_req import is_solidity_pragma


class UnspecificSolidityPragmaDetector(IssueDetector):
    def detect(self, context: WorkspaceContext) -> bool:
        for pragma in context.pragma_directives():
            if not is_solidity_pragma(pragma.literals):
                continue
            if any("^" in literal or ">" in literal for literal in pragma.literals):
                self.capture(context, pragma)
        return bool(self._instances)

    def severity(self) -> IssueSeverity:
        return IssueSeverity.LOW

    def title(self) -> str:
        return "Solidity pragma should be specific, not wide"

    def description(self) -> str:
        return (
            "Consider using a specific version of Solidity in your contracts instead of a wide "
            "version. For example, instead of `pragma solidity ^0.8.0;`, use `pragma solidity 0.8.0;`"
        )

    def name(self) -> str:
        return DetectorName.UNSPECIFIC_SOLIDITY_PRAGMA.value
