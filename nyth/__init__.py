"""nyth: a static-analysis engine over Solidity compiler ASTs."""

__version__ = "0.1.0"

from .context import WorkspaceContext
from .errors import ConfigError, MalformedAst, NythError, UnknownDetectorError, VersionRequirementError
from .ingest import ingest, load_foundry_output, load_foundry_outputs
from .nodes import NodeType
from .report import Report, run_detectors

__all__ = [
    "ConfigError",
    "MalformedAst",
    "NodeType",
    "NythError",
    "Report",
    "UnknownDetectorError",
    "VersionRequirementError",
    "WorkspaceContext",
    "__version__",
    "ingest",
    "load_foundry_output",
    "load_foundry_outputs",
    "run_detectors",
]
