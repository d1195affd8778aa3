"""Workspace registry: every node of one analysis run, keyed by identity."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .nodes import (
    AstNode,
    Assignment,
    BinaryOperation,
    ContractDefinition,
    EmitStatement,
    EventDefinition,
    ForStatement,
    FunctionCall,
    FunctionDefinition,
    Identifier,
    ImportDirective,
    Literal,
    MemberAccess,
    ModifierDefinition,
    ModifierInvocation,
    NodeType,
    PragmaDirective,
    SourceUnit,
    VariableDeclaration,
    WhileStatement,
)


class WorkspaceContext:
    """Read-only registry produced by :func:`nyth.ingest.ingest`.

    Holds the ``id -> node`` map, the derived ``id -> parent id`` map (no
    entry for source units) and the source units in load order.  Lookups on
    unknown ids return ``None`` rather than raising, so callers holding stale
    or detached ids degrade to "no result".
    """

    def __init__(
        self,
        nodes: Dict[int, AstNode],
        parent_links: Dict[int, int],
        source_units: Sequence[SourceUnit],
        by_type: Dict[NodeType, List[AstNode]],
    ) -> None:
        self._nodes = MappingProxyType(dict(nodes))
        self._parent_links = MappingProxyType(dict(parent_links))
        self._source_units: Tuple[SourceUnit, ...] = tuple(source_units)
        self._by_type: Mapping[NodeType, Tuple[AstNode, ...]] = MappingProxyType(
            {node_type: tuple(items) for node_type, items in by_type.items()}
        )

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> Mapping[int, AstNode]:
        return self._nodes

    @property
    def parent_links(self) -> Mapping[int, int]:
        return self._parent_links

    @property
    def source_units(self) -> Tuple[SourceUnit, ...]:
        return self._source_units

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def get(self, node_id: Optional[int]) -> Optional[AstNode]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def parent_of(self, node_id: Optional[int]) -> Optional[int]:
        if node_id is None:
            return None
        return self._parent_links.get(node_id)

    def iter_ancestor_ids(self, node_id: Optional[int]) -> Iterable[int]:
        """Yield parent ids from the immediate parent up to the source unit."""
        if node_id not in self._nodes:
            return
        current = self._parent_links.get(node_id)
        while current is not None:
            yield current
            current = self._parent_links.get(current)

    def get_ancestors(self, node_id: Optional[int]) -> List[AstNode]:
        return [self._nodes[ancestor] for ancestor in self.iter_ancestor_ids(node_id)]

    def source_unit_of(self, node_id: Optional[int]) -> Optional[SourceUnit]:
        """Owning source unit of *node_id* (the node itself for a unit)."""
        node = self.get(node_id)
        if node is None:
            return None
        root_id = node_id
        for root_id in self.iter_ancestor_ids(node_id):
            pass
        root = self._nodes[root_id]
        return root if isinstance(root, SourceUnit) else None

    def source_unit_by_path(self, absolute_path: str) -> Optional[SourceUnit]:
        for unit in self._source_units:
            if unit.absolute_path == absolute_path:
                return unit
        return None

    # ------------------------------------------------------------------
    # Per-kind indices (load order, pre-order within each unit)
    # ------------------------------------------------------------------

    def nodes_of_type(self, node_type: NodeType) -> Tuple[AstNode, ...]:
        return self._by_type.get(node_type, ())

    def pragma_directives(self) -> Tuple[PragmaDirective, ...]:
        return self.nodes_of_type(NodeType.PRAGMA_DIRECTIVE)

    def import_directives(self) -> Tuple[ImportDirective, ...]:
        return self.nodes_of_type(NodeType.IMPORT_DIRECTIVE)

    def contract_definitions(self) -> Tuple[ContractDefinition, ...]:
        return self.nodes_of_type(NodeType.CONTRACT_DEFINITION)

    def function_definitions(self) -> Tuple[FunctionDefinition, ...]:
        return self.nodes_of_type(NodeType.FUNCTION_DEFINITION)

    def modifier_definitions(self) -> Tuple[ModifierDefinition, ...]:
        return self.nodes_of_type(NodeType.MODIFIER_DEFINITION)

    def modifier_invocations(self) -> Tuple[ModifierInvocation, ...]:
        return self.nodes_of_type(NodeType.MODIFIER_INVOCATION)

    def event_definitions(self) -> Tuple[EventDefinition, ...]:
        return self.nodes_of_type(NodeType.EVENT_DEFINITION)

    def emit_statements(self) -> Tuple[EmitStatement, ...]:
        return self.nodes_of_type(NodeType.EMIT_STATEMENT)

    def variable_declarations(self) -> Tuple[VariableDeclaration, ...]:
        return self.nodes_of_type(NodeType.VARIABLE_DECLARATION)

    def assignments(self) -> Tuple[Assignment, ...]:
        return self.nodes_of_type(NodeType.ASSIGNMENT)

    def binary_operations(self) -> Tuple[BinaryOperation, ...]:
        return self.nodes_of_type(NodeType.BINARY_OPERATION)

    def function_calls(self) -> Tuple[FunctionCall, ...]:
        return self.nodes_of_type(NodeType.FUNCTION_CALL)

    def member_accesses(self) -> Tuple[MemberAccess, ...]:
        return self.nodes_of_type(NodeType.MEMBER_ACCESS)

    def identifiers(self) -> Tuple[Identifier, ...]:
        return self.nodes_of_type(NodeType.IDENTIFIER)

    def literals(self) -> Tuple[Literal, ...]:
        return self.nodes_of_type(NodeType.LITERAL)

    def for_statements(self) -> Tuple[ForStatement, ...]:
        return self.nodes_of_type(NodeType.FOR_STATEMENT)

    def while_statements(self) -> Tuple[WhileStatement, ...]:
        return self.nodes_of_type(NodeType.WHILE_STATEMENT)
