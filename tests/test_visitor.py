"""Tests for double-dispatch traversal."""

from nyth.browser import extract_identifiers
from nyth.ingest import build_node
from nyth.nodes import NodeType
from nyth.visitor import AstVisitor, NodeIdReceiver, node_id_of


class RecordingVisitor(AstVisitor):
    def __init__(self):
        self.events = []

    def generic_visit(self, node):
        self.events.append(("visit", node.node_type.value))
        return True

    def visit_function_definition(self, node):
        self.events.append(("function", node.name))
        return True

    def end_visit_function_definition(self, node):
        self.events.append(("end", node.name))


class PruningVisitor(AstVisitor):
    """Stops at every for-loop."""

    def __init__(self):
        self.seen = []

    def generic_visit(self, node):
        self.seen.append(node.node_type)
        return True

    def visit_for_statement(self, node):
        self.seen.append(node.node_type)
        return False


class TestDispatch:
    """Test handler lookup and traversal order."""

    def test_specific_handler_wins(self, zero_address_context):
        visitor = RecordingVisitor()
        zero_address_context.source_units[0].accept(visitor)

        functions = [e for e in visitor.events if e[0] in ("function", "end")]
        assert functions == [
            ("function", "badSetOwner"),
            ("end", "badSetOwner"),
            ("function", "goodSetOwner"),
            ("end", "goodSetOwner"),
            ("function", "setCounter"),
            ("end", "setCounter"),
        ]
        assert ("visit", "FunctionDefinition") not in visitor.events

    def test_unit_visited_first(self, zero_address_context):
        visitor = RecordingVisitor()
        zero_address_context.source_units[0].accept(visitor)
        assert visitor.events[0] == ("visit", "SourceUnit")
        assert visitor.events[1] == ("visit", "PragmaDirective")

    def test_false_prunes_subtree(self, loops_context):
        """Test returning False skips the children of that node only."""
        visitor = PruningVisitor()
        loops_context.source_units[0].accept(visitor)

        assert visitor.seen.count(NodeType.FOR_STATEMENT) == 2
        # the require between the loops is still reached
        assert NodeType.EXPRESSION_STATEMENT in visitor.seen
        assert NodeType.INDEX_ACCESS not in visitor.seen
        assert NodeType.UNARY_OPERATION not in visitor.seen

    def test_every_node_visited_without_handlers(self, loops_context):
        counter = AstVisitor()
        visited = []
        counter.generic_visit = lambda node: visited.append(node.id) or True
        loops_context.source_units[0].accept(counter)
        assert sorted(visited) == sorted(loops_context.nodes)

    def test_typed_extractor_uses_identifier_handler(self, zero_address_context):
        names = [i.name for i in extract_identifiers(zero_address_context.source_units[0])]
        assert names.count("owner") == 2
        assert names.count("newOwner") == 3


class TestNodeIds:
    """Test identity hand-off through accept_id."""

    def test_receiver(self, zero_address_context):
        unit = zero_address_context.source_units[0]
        receiver = NodeIdReceiver()
        unit.accept_id(receiver)
        assert receiver.id == unit.id

    def test_node_id_of(self, zero_address_context):
        unit = zero_address_context.source_units[0]
        assert node_id_of(unit) == unit.id
        assert node_id_of(42) == 42
        assert node_id_of(None) is None
        assert node_id_of(True) is None
        assert node_id_of("42") is None


class TestEveryKind:
    """Test every node kind can be dispatched by name."""

    def test_handlers_resolve_for_all_kinds(self):
        for node_type in NodeType:
            node = build_node({"id": 1, "nodeType": node_type.value})
            calls = []
            visitor = AstVisitor()
            setattr(visitor, node_type.visit_method, lambda n: calls.append(("visit", n.id)))
            setattr(visitor, node_type.end_visit_method, lambda n: calls.append(("end", n.id)))

            node.accept(visitor)

            assert calls == [("visit", 1), ("end", 1)], node_type
