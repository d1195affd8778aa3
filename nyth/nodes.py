"""Solidity AST node model.

Every node kind emitted by ``solc`` in its JSON AST maps to exactly one frozen
dataclass below.  The set is closed: :data:`NODE_CLASSES` holds one class per
:class:`NodeType` member and the module refuses to import otherwise.

Nodes own their sub-nodes (fields declared with :func:`_child` /
:func:`_children`).  References to declarations, scopes and base contracts are
plain integer ids resolved through :class:`~nyth.context.WorkspaceContext`.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass, field, fields
from enum import Enum
from functools import cached_property, lru_cache
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Iterator, Optional, Tuple, Type

if TYPE_CHECKING:
    from .visitor import AstVisitor


class NodeType(str, Enum):
    """``nodeType`` values understood by the workspace."""

    SOURCE_UNIT = "SourceUnit"
    PRAGMA_DIRECTIVE = "PragmaDirective"
    IMPORT_DIRECTIVE = "ImportDirective"
    CONTRACT_DEFINITION = "ContractDefinition"
    INHERITANCE_SPECIFIER = "InheritanceSpecifier"
    USING_FOR_DIRECTIVE = "UsingForDirective"
    STRUCT_DEFINITION = "StructDefinition"
    ENUM_DEFINITION = "EnumDefinition"
    ENUM_VALUE = "EnumValue"
    USER_DEFINED_VALUE_TYPE_DEFINITION = "UserDefinedValueTypeDefinition"
    ERROR_DEFINITION = "ErrorDefinition"
    EVENT_DEFINITION = "EventDefinition"
    FUNCTION_DEFINITION = "FunctionDefinition"
    MODIFIER_DEFINITION = "ModifierDefinition"
    MODIFIER_INVOCATION = "ModifierInvocation"
    OVERRIDE_SPECIFIER = "OverrideSpecifier"
    PARAMETER_LIST = "ParameterList"
    VARIABLE_DECLARATION = "VariableDeclaration"
    STRUCTURED_DOCUMENTATION = "StructuredDocumentation"
    BLOCK = "Block"
    UNCHECKED_BLOCK = "UncheckedBlock"
    PLACEHOLDER_STATEMENT = "PlaceholderStatement"
    EXPRESSION_STATEMENT = "ExpressionStatement"
    VARIABLE_DECLARATION_STATEMENT = "VariableDeclarationStatement"
    IF_STATEMENT = "IfStatement"
    FOR_STATEMENT = "ForStatement"
    WHILE_STATEMENT = "WhileStatement"
    DO_WHILE_STATEMENT = "DoWhileStatement"
    RETURN = "Return"
    BREAK = "Break"
    CONTINUE = "Continue"
    EMIT_STATEMENT = "EmitStatement"
    REVERT_STATEMENT = "RevertStatement"
    TRY_STATEMENT = "TryStatement"
    TRY_CATCH_CLAUSE = "TryCatchClause"
    INLINE_ASSEMBLY = "InlineAssembly"
    ASSIGNMENT = "Assignment"
    BINARY_OPERATION = "BinaryOperation"
    UNARY_OPERATION = "UnaryOperation"
    CONDITIONAL = "Conditional"
    FUNCTION_CALL = "FunctionCall"
    FUNCTION_CALL_OPTIONS = "FunctionCallOptions"
    MEMBER_ACCESS = "MemberAccess"
    INDEX_ACCESS = "IndexAccess"
    INDEX_RANGE_ACCESS = "IndexRangeAccess"
    IDENTIFIER = "Identifier"
    IDENTIFIER_PATH = "IdentifierPath"
    LITERAL = "Literal"
    TUPLE_EXPRESSION = "TupleExpression"
    NEW_EXPRESSION = "NewExpression"
    ELEMENTARY_TYPE_NAME_EXPRESSION = "ElementaryTypeNameExpression"
    ELEMENTARY_TYPE_NAME = "ElementaryTypeName"
    USER_DEFINED_TYPE_NAME = "UserDefinedTypeName"
    MAPPING = "Mapping"
    ARRAY_TYPE_NAME = "ArrayTypeName"
    FUNCTION_TYPE_NAME = "FunctionTypeName"

    @property
    def snake_name(self) -> str:
        return _SNAKE_NAMES[self]

    @property
    def visit_method(self) -> str:
        """Name of the :class:`~nyth.visitor.AstVisitor` handler for this kind."""
        return "visit_" + _SNAKE_NAMES[self]

    @property
    def end_visit_method(self) -> str:
        return "end_visit_" + _SNAKE_NAMES[self]


_SNAKE_NAMES: Dict[NodeType, str] = {
    member: re.sub(r"(?<!^)(?=[A-Z])", "_", member.value).lower() for member in NodeType
}


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

_SRC_RE = re.compile(r"^(-?\d+):(-?\d+):(-?\d+)$")


@dataclass(frozen=True)
class SourceLocation:
    """``src`` attribute of a node: byte offset, byte length, file index."""

    offset: int
    length: int
    file_index: int

    @classmethod
    def parse(cls, src: str) -> Optional["SourceLocation"]:
        """Parse ``"offset:length:file"``; return None when the text does not match."""
        match = _SRC_RE.match(src.strip())
        if not match:
            return None
        offset, length, file_index = (int(part) for part in match.groups())
        return cls(offset, length, file_index)

    @property
    def range(self) -> str:
        return f"{self.offset}:{self.length}"

    def __str__(self) -> str:
        return f"{self.offset}:{self.length}:{self.file_index}"


@dataclass(frozen=True)
class TypeDescriptions:
    type_string: Optional[str] = None
    type_identifier: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "TypeDescriptions":
        if not isinstance(raw, dict):
            return cls()
        return cls(raw.get("typeString"), raw.get("typeIdentifier"))


# ---------------------------------------------------------------------------
# Field declarations
# ---------------------------------------------------------------------------
#
# The ingestion builder reads the ``ast`` metadata of each dataclass field to
# know how to convert the matching JSON key.  ``key`` defaults to the
# camelCase spelling of the field name.

def _child(key: Optional[str] = None, *, text_ok: bool = False) -> Any:
    return field(default=None, metadata={"ast": "child", "key": key, "text_ok": text_ok})


def _children(key: Optional[str] = None) -> Any:
    return field(default=(), metadata={"ast": "children", "key": key})


def _attr(key: Optional[str] = None, default: Any = None) -> Any:
    return field(default=default, metadata={"ast": "attr", "key": key})


def _types(key: str = "typeDescriptions") -> Any:
    return field(default=TypeDescriptions(), metadata={"ast": "types", "key": key})


def _types_list(key: str) -> Any:
    return field(default=None, metadata={"ast": "types_list", "key": key})


NODE_CLASSES: Dict[NodeType, Type["AstNode"]] = {}


def _node(node_type: NodeType):
    """Turn a class into a frozen node dataclass registered for *node_type*."""

    def decorator(cls):
        cls = dataclass(frozen=True, eq=False, repr=False, kw_only=True)(cls)
        cls.node_type = node_type
        NODE_CLASSES[node_type] = cls
        return cls

    return decorator


@lru_cache(maxsize=None)
def child_field_names(cls: Type["AstNode"]) -> Tuple[str, ...]:
    """Owned sub-node fields of *cls*, in declaration order."""
    return tuple(
        f.name for f in fields(cls) if f.metadata.get("ast") in ("child", "children")
    )


# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False, repr=False, kw_only=True)
class AstNode:
    """Common part of every node: identity plus optional source locator."""

    node_type: ClassVar[NodeType]

    id: int
    src: Optional[SourceLocation] = None

    def children(self) -> Iterator["AstNode"]:
        """Yield owned sub-nodes in declaration order."""
        for name in child_field_names(type(self)):
            value = getattr(self, name)
            if isinstance(value, tuple):
                for item in value:
                    if item is not None:
                        yield item
            elif isinstance(value, AstNode):
                yield value

    def accept(self, visitor: "AstVisitor") -> None:
        if visitor.visit(self):
            for child in self.children():
                child.accept(visitor)
        visitor.end_visit(self)

    def accept_id(self, visitor: "AstVisitor") -> None:
        visitor.visit_node_id(self.id)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"


@dataclass(frozen=True, eq=False, repr=False, kw_only=True)
class Expression(AstNode):
    type_descriptions: TypeDescriptions = _types()
    argument_types: Optional[Tuple[TypeDescriptions, ...]] = _types_list("argumentTypes")
    is_constant: bool = _attr(default=False)
    is_l_value: bool = _attr(default=False)
    is_pure: bool = _attr(default=False)
    l_value_requested: bool = _attr(default=False)


# ===================================================================
# Source units and directives
# ===================================================================

@_node(NodeType.SOURCE_UNIT)
class SourceUnit(AstNode):
    absolute_path: Optional[str] = _attr()
    license: Optional[str] = _attr()
    exported_symbols: Dict[str, Tuple[int, ...]] = _attr(default=None)
    nodes: Tuple[AstNode, ...] = _children()
    # Raw source text, attached at ingestion when available.
    source: Optional[str] = _attr()

    @cached_property
    def encoded_source(self) -> Optional[bytes]:
        return self.source.encode("utf-8") if self.source is not None else None

    @cached_property
    def line_starts(self) -> Tuple[int, ...]:
        """Byte offsets at which each line of :attr:`source` begins."""
        data = self.encoded_source or b""
        starts = [0]
        index = data.find(b"\n")
        while index != -1:
            starts.append(index + 1)
            index = data.find(b"\n", index + 1)
        return tuple(starts)

    def line_of(self, offset: int) -> int:
        return bisect_right(self.line_starts, offset)


@_node(NodeType.PRAGMA_DIRECTIVE)
class PragmaDirective(AstNode):
    literals: Tuple[str, ...] = _attr(default=())


@_node(NodeType.IMPORT_DIRECTIVE)
class ImportDirective(AstNode):
    file: str = _attr(default="")
    absolute_path: Optional[str] = _attr()
    source_unit: Optional[int] = _attr()
    scope: Optional[int] = _attr()
    unit_alias: str = _attr(default="")
    symbol_aliases: Tuple[Dict[str, Any], ...] = _attr(default=())


@_node(NodeType.STRUCTURED_DOCUMENTATION)
class StructuredDocumentation(AstNode):
    text: str = _attr(default="")


# ===================================================================
# Contracts and declarations
# ===================================================================

@_node(NodeType.CONTRACT_DEFINITION)
class ContractDefinition(AstNode):
    name: str = _attr(default="")
    contract_kind: str = _attr(default="contract")
    abstract: bool = _attr(default=False)
    fully_implemented: Optional[bool] = _attr()
    linearized_base_contracts: Tuple[int, ...] = _attr(default=())
    scope: Optional[int] = _attr()
    documentation: Optional[AstNode] = _child(text_ok=True)
    base_contracts: Tuple[AstNode, ...] = _children()
    nodes: Tuple[AstNode, ...] = _children()


@_node(NodeType.INHERITANCE_SPECIFIER)
class InheritanceSpecifier(AstNode):
    base_name: Optional[AstNode] = _child()
    arguments: Tuple[AstNode, ...] = _children()


@_node(NodeType.USING_FOR_DIRECTIVE)
class UsingForDirective(AstNode):
    is_global: bool = _attr("global", default=False)
    function_list: Tuple[Dict[str, Any], ...] = _attr(default=())
    library_name: Optional[AstNode] = _child()
    type_name: Optional[AstNode] = _child()


@_node(NodeType.STRUCT_DEFINITION)
class StructDefinition(AstNode):
    name: str = _attr(default="")
    canonical_name: Optional[str] = _attr()
    visibility: Optional[str] = _attr()
    scope: Optional[int] = _attr()
    members: Tuple[AstNode, ...] = _children()


@_node(NodeType.ENUM_DEFINITION)
class EnumDefinition(AstNode):
    name: str = _attr(default="")
    canonical_name: Optional[str] = _attr()
    members: Tuple[AstNode, ...] = _children()


@_node(NodeType.ENUM_VALUE)
class EnumValue(AstNode):
    name: str = _attr(default="")


@_node(NodeType.USER_DEFINED_VALUE_TYPE_DEFINITION)
class UserDefinedValueTypeDefinition(AstNode):
    name: str = _attr(default="")
    canonical_name: Optional[str] = _attr()
    underlying_type: Optional[AstNode] = _child()


@_node(NodeType.ERROR_DEFINITION)
class ErrorDefinition(AstNode):
    name: str = _attr(default="")
    error_selector: Optional[str] = _attr()
    documentation: Optional[AstNode] = _child(text_ok=True)
    parameters: Optional[AstNode] = _child()


@_node(NodeType.EVENT_DEFINITION)
class EventDefinition(AstNode):
    name: str = _attr(default="")
    anonymous: bool = _attr(default=False)
    event_selector: Optional[str] = _attr()
    documentation: Optional[AstNode] = _child(text_ok=True)
    parameters: Optional[AstNode] = _child()


@_node(NodeType.FUNCTION_DEFINITION)
class FunctionDefinition(AstNode):
    name: str = _attr(default="")
    kind: str = _attr(default="function")
    visibility: str = _attr(default="public")
    state_mutability: str = _attr(default="nonpayable")
    virtual: bool = _attr(default=False)
    implemented: bool = _attr(default=True)
    function_selector: Optional[str] = _attr()
    scope: Optional[int] = _attr()
    documentation: Optional[AstNode] = _child(text_ok=True)
    overrides: Optional[AstNode] = _child()
    parameters: Optional[AstNode] = _child()
    return_parameters: Optional[AstNode] = _child()
    modifiers: Tuple[AstNode, ...] = _children()
    body: Optional[AstNode] = _child()

    def parameter_ids(self) -> Tuple[int, ...]:
        if self.parameters is None:
            return ()
        return tuple(p.id for p in self.parameters.children())


@_node(NodeType.MODIFIER_DEFINITION)
class ModifierDefinition(AstNode):
    name: str = _attr(default="")
    visibility: str = _attr(default="internal")
    virtual: bool = _attr(default=False)
    documentation: Optional[AstNode] = _child(text_ok=True)
    parameters: Optional[AstNode] = _child()
    overrides: Optional[AstNode] = _child()
    body: Optional[AstNode] = _child()


@_node(NodeType.MODIFIER_INVOCATION)
class ModifierInvocation(AstNode):
    kind: Optional[str] = _attr()
    modifier_name: Optional[AstNode] = _child()
    arguments: Tuple[AstNode, ...] = _children()


@_node(NodeType.OVERRIDE_SPECIFIER)
class OverrideSpecifier(AstNode):
    overrides: Tuple[AstNode, ...] = _children()


@_node(NodeType.PARAMETER_LIST)
class ParameterList(AstNode):
    parameters: Tuple[AstNode, ...] = _children()


@_node(NodeType.VARIABLE_DECLARATION)
class VariableDeclaration(AstNode):
    name: str = _attr(default="")
    constant: bool = _attr(default=False)
    mutability: Optional[str] = _attr()
    state_variable: bool = _attr(default=False)
    storage_location: str = _attr(default="default")
    visibility: str = _attr(default="internal")
    indexed: bool = _attr(default=False)
    scope: Optional[int] = _attr()
    function_selector: Optional[str] = _attr()
    type_descriptions: TypeDescriptions = _types()
    documentation: Optional[AstNode] = _child(text_ok=True)
    type_name: Optional[AstNode] = _child()
    overrides: Optional[AstNode] = _child()
    value: Optional[AstNode] = _child()


# ===================================================================
# Statements
# ===================================================================

@_node(NodeType.BLOCK)
class Block(AstNode):
    statements: Tuple[AstNode, ...] = _children()


@_node(NodeType.UNCHECKED_BLOCK)
class UncheckedBlock(AstNode):
    statements: Tuple[AstNode, ...] = _children()


@_node(NodeType.PLACEHOLDER_STATEMENT)
class PlaceholderStatement(AstNode):
    pass


@_node(NodeType.EXPRESSION_STATEMENT)
class ExpressionStatement(AstNode):
    expression: Optional[AstNode] = _child()


@_node(NodeType.VARIABLE_DECLARATION_STATEMENT)
class VariableDeclarationStatement(AstNode):
    assignments: Tuple[Optional[int], ...] = _attr(default=())
    declarations: Tuple[Optional[AstNode], ...] = _children()
    initial_value: Optional[AstNode] = _child()


@_node(NodeType.IF_STATEMENT)
class IfStatement(AstNode):
    condition: Optional[AstNode] = _child()
    true_body: Optional[AstNode] = _child()
    false_body: Optional[AstNode] = _child()


@_node(NodeType.FOR_STATEMENT)
class ForStatement(AstNode):
    initialization_expression: Optional[AstNode] = _child()
    condition: Optional[AstNode] = _child()
    loop_expression: Optional[AstNode] = _child()
    body: Optional[AstNode] = _child()


@_node(NodeType.WHILE_STATEMENT)
class WhileStatement(AstNode):
    condition: Optional[AstNode] = _child()
    body: Optional[AstNode] = _child()


@_node(NodeType.DO_WHILE_STATEMENT)
class DoWhileStatement(AstNode):
    body: Optional[AstNode] = _child()
    condition: Optional[AstNode] = _child()


@_node(NodeType.RETURN)
class Return(AstNode):
    function_return_parameters: Optional[int] = _attr()
    expression: Optional[AstNode] = _child()


@_node(NodeType.BREAK)
class Break(AstNode):
    pass


@_node(NodeType.CONTINUE)
class Continue(AstNode):
    pass


@_node(NodeType.EMIT_STATEMENT)
class EmitStatement(AstNode):
    event_call: Optional[AstNode] = _child()


@_node(NodeType.REVERT_STATEMENT)
class RevertStatement(AstNode):
    error_call: Optional[AstNode] = _child()


@_node(NodeType.TRY_STATEMENT)
class TryStatement(AstNode):
    external_call: Optional[AstNode] = _child()
    clauses: Tuple[AstNode, ...] = _children()


@_node(NodeType.TRY_CATCH_CLAUSE)
class TryCatchClause(AstNode):
    error_name: str = _attr(default="")
    parameters: Optional[AstNode] = _child()
    block: Optional[AstNode] = _child()


@_node(NodeType.INLINE_ASSEMBLY)
class InlineAssembly(AstNode):
    # Yul bodies are kept verbatim; they are not part of the node registry.
    yul_ast: Optional[Dict[str, Any]] = _attr("AST")
    operations: Optional[str] = _attr()
    evm_version: Optional[str] = _attr()
    external_references: Tuple[Dict[str, Any], ...] = _attr(default=())


# ===================================================================
# Expressions
# ===================================================================

@_node(NodeType.ASSIGNMENT)
class Assignment(Expression):
    operator: str = _attr(default="=")
    left_hand_side: Optional[AstNode] = _child()
    right_hand_side: Optional[AstNode] = _child()


@_node(NodeType.BINARY_OPERATION)
class BinaryOperation(Expression):
    operator: str = _attr(default="")
    common_type: TypeDescriptions = _types("commonType")
    left_expression: Optional[AstNode] = _child()
    right_expression: Optional[AstNode] = _child()


@_node(NodeType.UNARY_OPERATION)
class UnaryOperation(Expression):
    operator: str = _attr(default="")
    prefix: bool = _attr(default=True)
    sub_expression: Optional[AstNode] = _child()


@_node(NodeType.CONDITIONAL)
class Conditional(Expression):
    condition: Optional[AstNode] = _child()
    true_expression: Optional[AstNode] = _child()
    false_expression: Optional[AstNode] = _child()


@_node(NodeType.FUNCTION_CALL)
class FunctionCall(Expression):
    kind: str = _attr(default="functionCall")
    names: Tuple[str, ...] = _attr(default=())
    try_call: bool = _attr(default=False)
    expression: Optional[AstNode] = _child()
    arguments: Tuple[AstNode, ...] = _children()


@_node(NodeType.FUNCTION_CALL_OPTIONS)
class FunctionCallOptions(Expression):
    names: Tuple[str, ...] = _attr(default=())
    expression: Optional[AstNode] = _child()
    options: Tuple[AstNode, ...] = _children()


@_node(NodeType.MEMBER_ACCESS)
class MemberAccess(Expression):
    member_name: str = _attr(default="")
    referenced_declaration: Optional[int] = _attr()
    expression: Optional[AstNode] = _child()


@_node(NodeType.INDEX_ACCESS)
class IndexAccess(Expression):
    base_expression: Optional[AstNode] = _child()
    index_expression: Optional[AstNode] = _child()


@_node(NodeType.INDEX_RANGE_ACCESS)
class IndexRangeAccess(Expression):
    base_expression: Optional[AstNode] = _child()
    start_expression: Optional[AstNode] = _child()
    end_expression: Optional[AstNode] = _child()


@_node(NodeType.IDENTIFIER)
class Identifier(Expression):
    name: str = _attr(default="")
    referenced_declaration: Optional[int] = _attr()
    overloaded_declarations: Tuple[int, ...] = _attr(default=())


@_node(NodeType.IDENTIFIER_PATH)
class IdentifierPath(AstNode):
    name: str = _attr(default="")
    referenced_declaration: Optional[int] = _attr()


@_node(NodeType.LITERAL)
class Literal(Expression):
    kind: str = _attr(default="number")
    value: Optional[str] = _attr()
    hex_value: Optional[str] = _attr()
    subdenomination: Optional[str] = _attr()


@_node(NodeType.TUPLE_EXPRESSION)
class TupleExpression(Expression):
    is_inline_array: bool = _attr(default=False)
    components: Tuple[Optional[AstNode], ...] = _children()


@_node(NodeType.NEW_EXPRESSION)
class NewExpression(Expression):
    type_name: Optional[AstNode] = _child()


@_node(NodeType.ELEMENTARY_TYPE_NAME_EXPRESSION)
class ElementaryTypeNameExpression(Expression):
    # Older compilers emit the type name as a plain string.
    type_name: Optional[AstNode] = _child(text_ok=True)


# ===================================================================
# Type names
# ===================================================================

@_node(NodeType.ELEMENTARY_TYPE_NAME)
class ElementaryTypeName(AstNode):
    name: str = _attr(default="")
    state_mutability: Optional[str] = _attr()
    type_descriptions: TypeDescriptions = _types()


@_node(NodeType.USER_DEFINED_TYPE_NAME)
class UserDefinedTypeName(AstNode):
    name: Optional[str] = _attr()
    referenced_declaration: Optional[int] = _attr()
    type_descriptions: TypeDescriptions = _types()
    path_node: Optional[AstNode] = _child()


@_node(NodeType.MAPPING)
class Mapping(AstNode):
    type_descriptions: TypeDescriptions = _types()
    key_type: Optional[AstNode] = _child()
    value_type: Optional[AstNode] = _child()


@_node(NodeType.ARRAY_TYPE_NAME)
class ArrayTypeName(AstNode):
    type_descriptions: TypeDescriptions = _types()
    base_type: Optional[AstNode] = _child()
    length: Optional[AstNode] = _child()


@_node(NodeType.FUNCTION_TYPE_NAME)
class FunctionTypeName(AstNode):
    visibility: str = _attr(default="internal")
    state_mutability: str = _attr(default="nonpayable")
    type_descriptions: TypeDescriptions = _types()
    parameter_types: Optional[AstNode] = _child()
    return_parameter_types: Optional[AstNode] = _child()


_unmapped = [member.value for member in NodeType if member not in NODE_CLASSES]
if _unmapped:
    raise RuntimeError(f"node kinds without a class: {', '.join(_unmapped)}")
