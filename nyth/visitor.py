"""Double-dispatch traversal over the node model.

``node.accept(visitor)`` hands control to ``visitor.visit(node)``, which looks
up the handler named after the node's kind (``visit_function_definition``,
``visit_identifier``, ...).  A handler returning ``False`` prunes the subtree;
anything else continues into the owned children in declaration order.  After
the children, ``end_visit_<kind>`` is called if the visitor defines it.

Kinds without a handler fall through to :meth:`AstVisitor.generic_visit`,
so a visitor only spells out the kinds it cares about.
"""

from __future__ import annotations

from typing import Optional

from .nodes import AstNode


class AstVisitor:
    """Base visitor; every handler is optional."""

    def visit(self, node: AstNode) -> bool:
        handler = getattr(self, node.node_type.visit_method, None)
        if handler is None:
            return self.generic_visit(node)
        return handler(node) is not False

    def end_visit(self, node: AstNode) -> None:
        handler = getattr(self, node.node_type.end_visit_method, None)
        if handler is not None:
            handler(node)

    def generic_visit(self, node: AstNode) -> bool:
        return True

    def visit_node_id(self, node_id: Optional[int]) -> None:
        """Receive the identity of the node ``accept_id`` was called on."""


class NodeIdReceiver(AstVisitor):
    """Capture the id of whatever node it is handed via ``accept_id``."""

    def __init__(self) -> None:
        self.id: Optional[int] = None

    def visit_node_id(self, node_id: Optional[int]) -> None:
        self.id = node_id


def node_id_of(node: object) -> Optional[int]:
    """Identity of *node*; ints pass through, anything else yields None."""
    if isinstance(node, bool):
        return None
    if isinstance(node, int):
        return node
    if not isinstance(node, AstNode):
        return None
    receiver = NodeIdReceiver()
    node.accept_id(receiver)
    return receiver.id
