"""Address state variables assigned from unchecked parameters."""

from __future__ import annotations

from typing import Dict, Set

from ..browser import extract_assignments, extract_binary_operations, extract_identifiers
from ..context import WorkspaceContext
from ..nodes import FunctionDefinition, VariableDeclaration
from .base import DetectorName, IssueDetector, IssueSeverity


def is_mutable_address_state_variable(declaration: VariableDeclaration) -> bool:
    type_string = declaration.type_descriptions.type_string or ""
    return (
        not declaration.constant
        and declaration.mutability == "mutable"
        and declaration.state_variable
        and ("address" in type_string or "contract" in type_string)
    )


def compared_declarations(function: FunctionDefinition) -> Set[int]:
    """Declarations referenced on either side of an ``==``/``!=`` in *function*."""
    checked: Set[int] = set()
    for operation in extract_binary_operations(function):
        if operation.operator not in ("==", "!="):
            continue
        for side in (operation.left_expression, operation.right_expression):
            checked.update(
                identifier.referenced_declaration
                for identifier in extract_identifiers(side)
                if identifier.referenced_declaration is not None
            )
    return checked


class ZeroAddressCheckDetector(IssueDetector):
    """Flag ``stateAddr = param`` when ``param`` is never compared in the function.

    Any parameter-sourced identifier on the right-hand side that escapes a
    comparison is enough to report the assignment.
    """

    def __init__(self) -> None:
        super().__init__()
        self.mutable_address_state_variables: Dict[int, VariableDeclaration] = {}

    def detect(self, context: WorkspaceContext) -> bool:
        self.mutable_address_state_variables = {
            declaration.id: declaration
            for declaration in context.variable_declarations()
            if is_mutable_address_state_variable(declaration)
        }

        for function in context.function_definitions():
            checked = compared_declarations(function)
            parameters = set(function.parameter_ids())

            for assignment in extract_assignments(function):
                if not any(
                    identifier.referenced_declaration in self.mutable_address_state_variables
                    for identifier in extract_identifiers(assignment.left_hand_side)
                ):
                    continue
                for identifier in extract_identifiers(assignment.right_hand_side):
                    referenced = identifier.referenced_declaration
                    if referenced not in checked and referenced in parameters:
                        self.capture(context, assignment)
        return bool(self._instances)

    def severity(self) -> IssueSeverity:
        return IssueSeverity.NC

    def title(self) -> str:
        return "Missing checks for `address(0)` when assigning values to address state variables"

    def description(self) -> str:
        return "Check for `address(0)` when assigning values to address state variables."

    def name(self) -> str:
        return DetectorName.ZERO_ADDRESS_CHECK.value
