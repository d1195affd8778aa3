"""PUSH0 availability: flag pragmas that let solc pick a version above 0.8.19."""

from __future__ import annotations

from ..context import WorkspaceContext
from .base import DetectorName, IssueDetector, IssueSeverity
from .version_req import Op, VersionReq, is_solidity_pragma, solidity_version_string


def version_req_allows_above_0_8_19(req: VersionReq) -> bool:
    """Coarse check of whether *req* admits a compiler newer than 0.8.19."""
    if len(req.comparators) == 1:
        comparator = req.comparators[0]
        if comparator.op in (Op.TILDE, Op.CARET):
            return comparator.major > 0 or (comparator.minor is not None and comparator.minor >= 8)
        if comparator.op in (Op.GREATER, Op.GREATER_EQ):
            return True
        if comparator.op is Op.EXACT:
            return (comparator.major, comparator.minor, comparator.patch) == (0, 8, 20)
        return False

    if len(req.comparators) == 2:
        upper = req.comparators[1]
        return (
            upper.major > 0
            or (upper.minor is not None and upper.minor >= 8)
        )
    return False


class PushZeroOpcodeDetector(IssueDetector):
    def detect(self, context: WorkspaceContext) -> bool:
        for pragma in context.pragma_directives():
            if not is_solidity_pragma(pragma.literals):
                continue
            req = VersionReq.parse(solidity_version_string(pragma.literals))
            if version_req_allows_above_0_8_19(req):
                self.capture(context, pragma)
        return bool(self._instances)

    def severity(self) -> IssueSeverity:
        return IssueSeverity.LOW

    def title(self) -> str:
        return "PUSH0 is not supported by all chains"

    def description(self) -> str:
        return (
            "Solc compiler version 0.8.20 switches the default target EVM version to Shanghai, "
            "which means that the generated bytecode will include PUSH0 opcodes. Be sure to select "
            "the appropriate EVM version in case you intend to deploy on a chain other than mainnet "
            "like L2 chains that may not support PUSH0, otherwise deployment of your contracts will fail."
        )

    def name(self) -> str:
        return DetectorName.PUSH_ZERO_OPCODE.value
