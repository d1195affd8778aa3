"""Build a :class:`~nyth.context.WorkspaceContext` from solc JSON ASTs.

Accepted payload shapes:

- a ``SourceUnit`` dict as emitted by ``solc --ast-compact-json``;
- a Foundry artifact (``{"ast": {...}}``);
- a standard-JSON output (``{"sources": {path: {"ast": {...}}}}``);
- a list mixing any of the above.

Ingestion is all-or-nothing: any structural problem raises
:class:`~nyth.errors.MalformedAst` and no context is produced.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Union

from .context import WorkspaceContext
from .errors import MalformedAst
from .nodes import NODE_CLASSES, AstNode, NodeType, SourceLocation, SourceUnit, TypeDescriptions
from .visitor import AstVisitor

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


# ===================================================================
# Raw dict -> node
# ===================================================================

def build_node(raw: Any, path: str = "$") -> AstNode:
    """Convert one raw solc node (and everything it owns) into the node model."""
    if not isinstance(raw, dict):
        raise MalformedAst(f"expected a node object, got {type(raw).__name__}", path)

    raw_type = raw.get("nodeType")
    try:
        node_type = NodeType(raw_type)
    except ValueError:
        raise MalformedAst(f"unsupported nodeType {raw_type!r}", path) from None
    cls = NODE_CLASSES[node_type]

    node_id = raw.get("id")
    if not isinstance(node_id, int) or isinstance(node_id, bool):
        raise MalformedAst(f"{raw_type} without an integer id", path)

    kwargs: Dict[str, Any] = {"id": node_id, "src": _parse_src(raw.get("src"), path)}

    for f in fields(cls):
        kind = f.metadata.get("ast")
        if kind is None:
            continue
        key = f.metadata.get("key") or _camel(f.name)
        value = raw.get(key)
        field_path = f"{path}.{key}"

        if kind == "child":
            if value is None or (f.metadata.get("text_ok") and not isinstance(value, dict)):
                continue
            kwargs[f.name] = build_node(value, field_path)
        elif kind == "children":
            if value is None:
                continue
            if not isinstance(value, list):
                raise MalformedAst(f"expected a list for {key!r}", field_path)
            kwargs[f.name] = tuple(
                None if item is None else build_node(item, f"{field_path}[{index}]")
                for index, item in enumerate(value)
            )
        elif kind == "types":
            kwargs[f.name] = TypeDescriptions.from_raw(value)
        elif kind == "types_list":
            if isinstance(value, list):
                kwargs[f.name] = tuple(TypeDescriptions.from_raw(item) for item in value)
        elif value is not None:
            kwargs[f.name] = tuple(value) if isinstance(value, list) else value

    return cls(**kwargs)


def _parse_src(value: Any, path: str) -> Optional[SourceLocation]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedAst(f"src must be a string, got {type(value).__name__}", path)
    location = SourceLocation.parse(value)
    if location is None:
        raise MalformedAst(f"malformed src {value!r}", path)
    return location


# ===================================================================
# Registration pass
# ===================================================================

class _Registrar(AstVisitor):
    """Walk a unit once, registering each node and its parent."""

    def __init__(self) -> None:
        self.nodes: Dict[int, AstNode] = {}
        self.parent_links: Dict[int, int] = {}
        self.by_type: Dict[NodeType, List[AstNode]] = defaultdict(list)
        self._stack: List[int] = []

    def visit(self, node: AstNode) -> bool:
        if node.id in self.nodes:
            raise MalformedAst(f"duplicate node id {node.id} ({node.node_type.value})")
        self.nodes[node.id] = node
        if self._stack:
            self.parent_links[node.id] = self._stack[-1]
        self.by_type[node.node_type].append(node)
        self._stack.append(node.id)
        return True

    def end_visit(self, node: AstNode) -> None:
        self._stack.pop()


def _iter_unit_payloads(payload: Any, path: str = "$") -> Iterator[tuple]:
    if isinstance(payload, list):
        for index, item in enumerate(payload):
            yield from _iter_unit_payloads(item, f"{path}[{index}]")
    elif not isinstance(payload, dict):
        raise MalformedAst(f"unsupported payload of type {type(payload).__name__}", path)
    elif "nodeType" in payload:
        yield payload, path
    elif "ast" in payload:
        yield payload["ast"], f"{path}.ast"
    elif "sources" in payload and isinstance(payload["sources"], dict):
        for source_path, entry in payload["sources"].items():
            entry_path = f"{path}.sources[{source_path!r}]"
            if not isinstance(entry, dict) or "ast" not in entry:
                raise MalformedAst("source entry without an ast", entry_path)
            yield entry["ast"], f"{entry_path}.ast"
    else:
        raise MalformedAst("payload is neither a SourceUnit nor a compiler output", path)


def ingest(payload: Any, sources: Optional[Mapping[str, str]] = None) -> WorkspaceContext:
    """Build an immutable workspace from one parsed-AST payload.

    Args:
        payload: solc AST payload (see module docstring).
        sources: optional ``absolutePath -> source text`` map used to attach
            raw text to units that do not already carry a ``source`` key.

    Returns:
        The populated :class:`WorkspaceContext`.

    Raises:
        MalformedAst: if any node is missing an id, has an unknown kind, or
            an id is used twice.
    """
    sources = sources or {}
    registrar = _Registrar()
    units: List[SourceUnit] = []
    seen_paths = set()

    for raw_unit, path in _iter_unit_payloads(payload):
        if not isinstance(raw_unit, dict) or raw_unit.get("nodeType") != NodeType.SOURCE_UNIT.value:
            raise MalformedAst("top-level node must be a SourceUnit", path)
        absolute_path = raw_unit.get("absolutePath")
        if absolute_path is not None and absolute_path in seen_paths:
            # Foundry writes the same unit into the artifact of every contract it declares.
            logger.debug("Skipping repeated source unit %s", absolute_path)
            continue
        if "source" not in raw_unit and absolute_path in sources:
            raw_unit = dict(raw_unit, source=sources[absolute_path])

        unit = build_node(raw_unit, path)
        unit.accept(registrar)
        units.append(unit)
        if absolute_path is not None:
            seen_paths.add(absolute_path)

    context = WorkspaceContext(registrar.nodes, registrar.parent_links, units, registrar.by_type)
    logger.debug("Ingested %d source unit(s), %d node(s)", len(units), len(context))
    return context


# ===================================================================
# Foundry artifacts
# ===================================================================

def project_root_for(artifact: Path) -> Path:
    """Directory that contains the ``out`` folder *artifact* lives in."""
    parts = artifact.parts
    if "out" not in parts:
        return artifact.parent
    index = parts.index("out")
    return Path(*parts[:index]) if index else Path(".")


def read_foundry_output(artifact: PathLike, source_root: Optional[PathLike] = None) -> Dict[str, Any]:
    """Load a Foundry artifact and attach the source text of its unit.

    The source file is looked up as ``<source_root>/<absolutePath>``, where
    ``source_root`` defaults to the directory holding ``out/``.  A missing or
    undecodable source file is logged and left out; line numbers then resolve to 0.
    """
    artifact = Path(artifact)
    try:
        text = artifact.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedAst(f"cannot read {artifact}: {exc}") from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedAst(f"invalid JSON in {artifact}: {exc}") from exc

    ast = payload.get("ast") if isinstance(payload, dict) else None
    if not isinstance(ast, dict):
        raise MalformedAst(f"{artifact} has no 'ast' object")

    absolute_path = ast.get("absolutePath")
    if absolute_path and "source" not in ast:
        root = Path(source_root) if source_root is not None else project_root_for(artifact)
        source_file = root / absolute_path
        try:
            ast = dict(ast, source=source_file.read_text(encoding="utf-8"))
            logger.debug("Loaded Solidity source file: %s", source_file)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Error reading Solidity source file %s: %s", source_file, exc)
    return ast


def load_foundry_outputs(
    artifacts: Iterable[PathLike],
    source_root: Optional[PathLike] = None,
) -> WorkspaceContext:
    """Ingest several Foundry artifacts into one workspace."""
    return ingest([read_foundry_output(path, source_root) for path in artifacts])


def load_foundry_output(artifact: PathLike, source_root: Optional[PathLike] = None) -> WorkspaceContext:
    return load_foundry_outputs([artifact], source_root)


def collect_artifacts(paths: Sequence[PathLike]) -> List[Path]:
    """Expand directories into the ``*.json`` artifacts below them, sorted.

    ``build-info`` folders hold whole compiler runs, not per-contract
    artifacts, and are skipped.
    """
    found: List[Path] = []
    for entry in map(Path, paths):
        if entry.is_dir():
            found.extend(
                sorted(
                    p for p in entry.rglob("*.json")
                    if p.is_file() and "build-info" not in p.relative_to(entry).parts
                )
            )
        else:
            found.append(entry)
    return found
