"""Generic queries over a :class:`~nyth.context.WorkspaceContext`.

Relationship queries (ancestors, parent, closest ancestor of a kind,
children, peek) work from a node's identity and the registry's parent index.
Extraction queries walk a subtree with the visitor protocol and collect
matches in pre-order.  Nothing here raises for unknown or detached nodes:
the answer is simply ``None`` or empty.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple, Union

from .context import WorkspaceContext
from .location import resolve_src
from .nodes import (
    AstNode,
    Assignment,
    BinaryOperation,
    FunctionCall,
    Identifier,
    MemberAccess,
    NodeType,
    VariableDeclaration,
)
from .visitor import AstVisitor, node_id_of

NodeRef = Union[AstNode, int]
Predicate = Callable[[AstNode], bool]


# ===================================================================
# Relationship queries
# ===================================================================

def ancestors(context: WorkspaceContext, node: NodeRef) -> Iterator[AstNode]:
    """Lazily yield ancestors, immediate parent first, source unit last."""
    for ancestor_id in context.iter_ancestor_ids(node_id_of(node)):
        yield context.nodes[ancestor_id]


def parent(context: WorkspaceContext, node: NodeRef) -> Optional[AstNode]:
    return context.get(context.parent_of(node_id_of(node)))


def parent_chain(context: WorkspaceContext, node: NodeRef) -> Optional[List[AstNode]]:
    """The node itself followed by all its ancestors; None if unregistered."""
    current = context.get(node_id_of(node))
    if current is None:
        return None
    return [current, *ancestors(context, current)]


def closest_ancestor_of_type(
    context: WorkspaceContext,
    node: NodeRef,
    node_type: NodeType,
) -> Optional[AstNode]:
    """Nearest ancestor of *node_type*, or None when the chain runs out."""
    for ancestor in ancestors(context, node):
        if ancestor.node_type is node_type:
            return ancestor
    return None


def immediate_children(context: WorkspaceContext, node: NodeRef) -> Optional[List[AstNode]]:
    current = context.get(node_id_of(node))
    if current is None:
        return None
    return list(current.children())


@dataclass(frozen=True)
class Peek:
    """A node seen together with its parent and siblings."""

    node: AstNode
    parent: Optional[AstNode]
    siblings: Tuple[AstNode, ...] = field(default=())

    @property
    def index(self) -> Optional[int]:
        for position, sibling in enumerate(self.siblings):
            if sibling is self.node:
                return position
        return None

    @property
    def previous(self) -> Optional[AstNode]:
        index = self.index
        if index is None or index == 0:
            return None
        return self.siblings[index - 1]

    @property
    def next(self) -> Optional[AstNode]:
        index = self.index
        if index is None or index + 1 >= len(self.siblings):
            return None
        return self.siblings[index + 1]


def peek(context: WorkspaceContext, node: NodeRef) -> Optional[Peek]:
    """Local context of *node*: its parent and every child of that parent.

    Source units have no parent and no siblings.
    """
    current = context.get(node_id_of(node))
    if current is None:
        return None
    owner = parent(context, current)
    siblings = tuple(owner.children()) if owner is not None else ()
    return Peek(current, owner, siblings)


def peek_source(context: WorkspaceContext, node: NodeRef) -> Optional[str]:
    """Source text covered by *node*, when its unit carries source."""
    node_id = node_id_of(node)
    current = context.get(node_id)
    unit = context.source_unit_of(node_id)
    if current is None or unit is None:
        return None
    resolved = resolve_src(current.src, unit)
    return resolved.snippet if resolved else None


# ===================================================================
# Extraction queries
# ===================================================================

class _Collector(AstVisitor):
    def __init__(self, predicate: Predicate) -> None:
        self.predicate = predicate
        self.extracted: List[AstNode] = []

    def generic_visit(self, node: AstNode) -> bool:
        if self.predicate(node):
            self.extracted.append(node)
        return True


def extract(root: Optional[AstNode], match: Union[NodeType, Predicate]) -> List[AstNode]:
    """Every node under *root* (inclusive) of a kind or passing a predicate.

    Results come in pre-order, i.e. source declaration order.
    """
    if root is None:
        return []
    if isinstance(match, NodeType):
        node_type = match
        collector = _Collector(lambda node: node.node_type is node_type)
    else:
        collector = _Collector(match)
    root.accept(collector)
    return collector.extracted


class ExtractIdentifiers(AstVisitor):
    """Collect identifiers; the typed counterpart of ``extract``."""

    def __init__(self) -> None:
        self.extracted: List[Identifier] = []

    @classmethod
    def from_node(cls, root: Optional[AstNode]) -> "ExtractIdentifiers":
        visitor = cls()
        if root is not None:
            root.accept(visitor)
        return visitor

    def visit_identifier(self, node: Identifier) -> bool:
        self.extracted.append(node)
        return True


def extract_identifiers(root: Optional[AstNode]) -> List[Identifier]:
    return ExtractIdentifiers.from_node(root).extracted


def extract_binary_operations(root: Optional[AstNode]) -> List[BinaryOperation]:
    return extract(root, NodeType.BINARY_OPERATION)


def extract_assignments(root: Optional[AstNode]) -> List[Assignment]:
    return extract(root, NodeType.ASSIGNMENT)


def extract_function_calls(root: Optional[AstNode]) -> List[FunctionCall]:
    return extract(root, NodeType.FUNCTION_CALL)


def extract_member_accesses(root: Optional[AstNode]) -> List[MemberAccess]:
    return extract(root, NodeType.MEMBER_ACCESS)


def extract_variable_declarations(root: Optional[AstNode]) -> List[VariableDeclaration]:
    return extract(root, NodeType.VARIABLE_DECLARATION)
