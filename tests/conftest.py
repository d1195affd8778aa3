"""Pytest configuration and fixtures for nyth tests.

ASTs are written by hand in the shape ``solc`` emits, anchored on the text
of the fixture contracts so that ``src`` byte offsets are real.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

from nyth.ingest import ingest

FIXTURES = Path(__file__).parent / "fixtures" / "contracts"


class SolcAstBuilder:
    """Hand out unique ids and compute ``src`` from anchor text."""

    def __init__(self, source: str, absolute_path: str = "src/Test.sol", file_index: int = 0,
                 first_id: int = 1) -> None:
        self.source = source
        self.absolute_path = absolute_path
        self.file_index = file_index
        self._encoded = source.encode("utf-8")
        self._next_id = first_id

    def src(self, at: str, nth: int = 0, span: Optional[int] = None, skip: int = 0) -> str:
        needle = at.encode("utf-8")
        position = -1
        for _ in range(nth + 1):
            position = self._encoded.find(needle, position + 1)
            if position == -1:
                raise ValueError(f"{at!r} occurs fewer than {nth + 1} times")
        length = len(needle) - skip if span is None else span
        return f"{position + skip}:{length}:{self.file_index}"

    def node(self, node_type: str, at: Optional[str] = None, nth: int = 0,
             span: Optional[int] = None, skip: int = 0, **attrs: Any) -> Dict[str, Any]:
        raw: Dict[str, Any] = {"id": self._next_id, "nodeType": node_type}
        self._next_id += 1
        if at is not None:
            raw["src"] = self.src(at, nth, span, skip)
        raw.update(attrs)
        return raw

    def identifier(self, name: str, declaration: Any = None, at: Optional[str] = None,
                   nth: int = 0, argument_types: Optional[List[str]] = None,
                   type_string: Optional[str] = None) -> Dict[str, Any]:
        if isinstance(declaration, dict):
            declaration = declaration["id"]
        attrs: Dict[str, Any] = {
            "name": name,
            "referencedDeclaration": declaration,
            "overloadedDeclarations": [],
            "typeDescriptions": {"typeString": type_string},
        }
        if argument_types is not None:
            attrs["argumentTypes"] = [{"typeString": t} for t in argument_types]
        return self.node("Identifier", at=at or name, nth=nth, span=len(name), **attrs)

    def literal(self, value: str, at: str, nth: int = 0, skip: int = 0) -> Dict[str, Any]:
        return self.node("Literal", at=at, nth=nth, skip=skip, span=len(value),
                         kind="number", value=value)

    def pragma(self, at: str, literals: List[str]) -> Dict[str, Any]:
        return self.node("PragmaDirective", at=at, literals=literals)

    def source_unit(self, nodes: List[Dict[str, Any]], attach_source: bool = True) -> Dict[str, Any]:
        raw = self.node("SourceUnit", absolutePath=self.absolute_path, exportedSymbols={},
                        nodes=nodes)
        raw["src"] = f"0:{len(self._encoded)}:{self.file_index}"
        if attach_source:
            raw["source"] = self.source
        return raw


def _state_or_local(b: SolcAstBuilder, name: str, type_string: str, at: str, nth: int = 0,
                    state: bool = False) -> Dict[str, Any]:
    return b.node(
        "VariableDeclaration", at=at, nth=nth, name=name, constant=False, mutability="mutable",
        stateVariable=state, storageLocation="default", visibility="public" if state else "internal",
        typeDescriptions={"typeString": type_string},
        typeName=b.node("ElementaryTypeName", at=at, nth=nth, span=len(type_string.split()[0]),
                        name=type_string.split()[0]),
    )


# ---------------------------------------------------------------------------
# RevertsAndRequiresInLoops.sol
# ---------------------------------------------------------------------------

def _require_call(b: SolcAstBuilder, at: str, argument: Dict[str, Any]) -> Dict[str, Any]:
    callee = b.identifier("require", at=at, argument_types=["bool"])
    call = b.node("FunctionCall", at=at, kind="functionCall", expression=callee,
                  arguments=[argument], names=[])
    return b.node("ExpressionStatement", at=at, expression=call)


def _for_loop(b: SolcAstBuilder, items: Dict[str, Any], var: str, length_nth: int,
              operator: str, bound: str) -> Dict[str, Any]:
    header = f"for (uint256 {var} = 0; {var} < items.length; {var}++)"
    decl = _state_or_local(b, var, "uint256", at=f"uint256 {var}")
    init = b.node(
        "VariableDeclarationStatement", at=f"uint256 {var} = 0", assignments=[decl["id"]],
        declarations=[decl], initialValue=b.literal("0", at=f"{var} = 0", skip=len(var) + 3),
    )
    condition = b.node(
        "BinaryOperation", at=f"{var} < items.length", operator="<",
        leftExpression=b.identifier(var, decl, at=f"{var} < items"),
        rightExpression=b.node(
            "MemberAccess", at="items.length", nth=length_nth, memberName="length",
            expression=b.identifier("items", items, at="items.length", nth=length_nth),
        ),
    )
    step = b.node(
        "ExpressionStatement", at=f"{var}++",
        expression=b.node("UnaryOperation", at=f"{var}++", operator="++", prefix=False,
                          subExpression=b.identifier(var, decl, at=f"{var}++")),
    )
    check_text = f"items[{var}] {operator} {bound}"
    check = b.node(
        "BinaryOperation", at=check_text, operator=operator,
        leftExpression=b.node(
            "IndexAccess", at=f"items[{var}]",
            baseExpression=b.identifier("items", items, at=f"items[{var}]"),
            indexExpression=b.identifier(var, decl, at=f"{var}]"),
        ),
        rightExpression=b.literal(bound, at=check_text, skip=len(check_text) - len(bound)),
    )
    body = b.node("Block", statements=[_require_call(b, f"require(items[{var}]", check)])
    return b.node("ForStatement", at=header, initializationExpression=init, condition=condition,
                  loopExpression=step, body=body)


LOOPS_PATH = "tests/fixtures/contracts/RevertsAndRequiresInLoops.sol"


def build_loops_payload(source: str, attach_source: bool = True,
                        absolute_path: str = LOOPS_PATH) -> Dict[str, Any]:
    b = SolcAstBuilder(source, absolute_path)
    pragma = b.pragma("pragma solidity ^0.8.20;", ["solidity", "^", "0.8", ".20"])
    items = b.node("VariableDeclaration", at="uint256[] memory items", name="items",
                   constant=False, mutability="mutable", stateVariable=False,
                   storageLocation="memory", typeDescriptions={"typeString": "uint256[]"})

    first_loop = _for_loop(b, items, "i", length_nth=0, operator=">", bound="0")
    outside = _require_call(
        b, "require(items.length",
        b.node(
            "BinaryOperation", at="items.length > 0", operator=">",
            leftExpression=b.node(
                "MemberAccess", at="items.length", nth=1, memberName="length",
                expression=b.identifier("items", items, at="items.length", nth=1),
            ),
            rightExpression=b.literal("0", at="items.length > 0", skip=15),
        ),
    )
    second_loop = _for_loop(b, items, "j", length_nth=2, operator="<", bound="100")

    function = b.node(
        "FunctionDefinition", at="function check", name="check", kind="function",
        visibility="external", stateMutability="pure", implemented=True, modifiers=[],
        parameters=b.node("ParameterList", at="uint256[] memory items", parameters=[items]),
        returnParameters=b.node("ParameterList", parameters=[]),
        body=b.node("Block", statements=[first_loop, outside, second_loop]),
    )
    contract = b.node("ContractDefinition", at="contract PotentialPanicInLoop",
                      name="PotentialPanicInLoop", contractKind="contract", abstract=False,
                      baseContracts=[], nodes=[function])
    return b.source_unit([pragma, contract], attach_source=attach_source)


# ---------------------------------------------------------------------------
# ZeroAddressCheck.sol
# ---------------------------------------------------------------------------

def _assignment(b: SolcAstBuilder, target: Dict[str, Any], value: Dict[str, Any],
                text: str, nth: int = 0) -> Dict[str, Any]:
    left, right = text.split(" = ")
    assignment = b.node(
        "Assignment", at=text, nth=nth, operator="=",
        leftHandSide=b.identifier(left, target, at=text, nth=nth),
        rightHandSide=b.identifier(right, value, at=f"{right};", nth=nth),
        typeDescriptions={"typeString": target["typeDescriptions"]["typeString"]},
    )
    return b.node("ExpressionStatement", at=text, nth=nth, expression=assignment)


def _function(b: SolcAstBuilder, name: str, parameter: Dict[str, Any],
              statements: List[Dict[str, Any]]) -> Dict[str, Any]:
    return b.node(
        "FunctionDefinition", at=f"function {name}", name=name, kind="function",
        visibility="external", stateMutability="nonpayable", implemented=True, modifiers=[],
        parameters=b.node("ParameterList", parameters=[parameter]),
        returnParameters=b.node("ParameterList", parameters=[]),
        body=b.node("Block", statements=statements),
    )


ZERO_ADDRESS_PATH = "tests/fixtures/contracts/ZeroAddressCheck.sol"


def build_zero_address_payload(source: str, attach_source: bool = True,
                               absolute_path: str = ZERO_ADDRESS_PATH) -> Dict[str, Any]:
    b = SolcAstBuilder(source, absolute_path)
    pragma = b.pragma("pragma solidity 0.8.19;", ["solidity", "0.8", ".19"])
    owner = _state_or_local(b, "owner", "address", at="address public owner", state=True)
    counter = _state_or_local(b, "counter", "uint256", at="uint256 public counter", state=True)

    bad_param = _state_or_local(b, "newOwner", "address", at="address newOwner", nth=0)
    bad = _function(b, "badSetOwner", bad_param,
                    [_assignment(b, owner, bad_param, "owner = newOwner", nth=0)])

    good_param = _state_or_local(b, "newOwner", "address", at="address newOwner", nth=1)
    zero = b.node(
        "FunctionCall", at="address(0)", kind="typeConversion", names=[],
        expression=b.node("ElementaryTypeNameExpression", at="address(0)", span=7,
                          typeName=b.node("ElementaryTypeName", at="address(0)", span=7,
                                          name="address")),
        arguments=[b.literal("0", at="address(0)", skip=8)],
    )
    check = b.node("BinaryOperation", at="newOwner != address(0)", operator="!=",
                   leftExpression=b.identifier("newOwner", good_param, at="newOwner != "),
                   rightExpression=zero)
    good = _function(b, "goodSetOwner", good_param, [
        _require_call(b, "require(newOwner", check),
        _assignment(b, owner, good_param, "owner = newOwner", nth=1),
    ])

    value_param = _state_or_local(b, "value", "uint256", at="uint256 value")
    set_counter = _function(b, "setCounter", value_param,
                            [_assignment(b, counter, value_param, "counter = value")])

    contract = b.node("ContractDefinition", at="contract ZeroAddressCheck",
                      name="ZeroAddressCheck", contractKind="contract", abstract=False,
                      baseContracts=[], nodes=[owner, counter, bad, good, set_counter])
    return b.source_unit([pragma, contract], attach_source=attach_source)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def builder_factory():
    """The :class:`SolcAstBuilder` class, for tests that assemble their own ASTs."""
    return SolcAstBuilder


@pytest.fixture
def loops_source_path() -> Path:
    return FIXTURES / "RevertsAndRequiresInLoops.sol"


@pytest.fixture
def loops_source(loops_source_path: Path) -> str:
    return loops_source_path.read_text(encoding="utf-8")


@pytest.fixture
def loops_payload(loops_source: str) -> Dict[str, Any]:
    return build_loops_payload(loops_source)


@pytest.fixture
def loops_context(loops_payload):
    return ingest(loops_payload)


@pytest.fixture
def zero_address_source_path() -> Path:
    return FIXTURES / "ZeroAddressCheck.sol"


@pytest.fixture
def zero_address_source(zero_address_source_path: Path) -> str:
    return zero_address_source_path.read_text(encoding="utf-8")


@pytest.fixture
def zero_address_payload(zero_address_source: str) -> Dict[str, Any]:
    return build_zero_address_payload(zero_address_source)


@pytest.fixture
def zero_address_context(zero_address_payload):
    return ingest(zero_address_payload)


@pytest.fixture
def make_pragma_context(builder_factory):
    """Build a one-pragma workspace: ``make_pragma_context(text, literals)``."""

    def _make(pragma_text: str, literals: List[str]):
        source = f"// SPDX-License-Identifier: MIT\n{pragma_text}\n\ncontract A {{}}\n"
        b = builder_factory(source, "src/A.sol")
        pragma = b.pragma(pragma_text, literals)
        contract = b.node("ContractDefinition", at="contract A", name="A", nodes=[])
        return ingest(b.source_unit([pragma, contract]))

    return _make


@pytest.fixture
def foundry_project(tmp_path: Path, zero_address_source: str) -> Path:
    """A Foundry-style tree: ``src/`` with the contract, ``out/`` with its artifact."""
    src_dir = tmp_path / "src"
    src_dir.mkdir()
    (src_dir / "ZeroAddressCheck.sol").write_text(zero_address_source, encoding="utf-8")

    artifact_dir = tmp_path / "out" / "ZeroAddressCheck.sol"
    artifact_dir.mkdir(parents=True)
    payload = build_zero_address_payload(zero_address_source, attach_source=False,
                                         absolute_path="src/ZeroAddressCheck.sol")
    (artifact_dir / "ZeroAddressCheck.json").write_text(json.dumps({"ast": payload}),
                                                         encoding="utf-8")
    return tmp_path
