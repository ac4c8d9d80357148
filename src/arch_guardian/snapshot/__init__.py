"""Project snapshot types and loader."""

from .loader import load_snapshot, snapshot_from_dict
from .models import (
    ClassRecord,
    ComputationRecord,
    DependencyGraph,
    FileSummary,
    FunctionRecord,
    ImportRecord,
    ModuleInfo,
    ProjectSnapshot,
    SourceLocation,
    VariableRecord,
    normalize_path,
)

__all__ = [
    "ClassRecord",
    "ComputationRecord",
    "DependencyGraph",
    "FileSummary",
    "FunctionRecord",
    "ImportRecord",
    "ModuleInfo",
    "ProjectSnapshot",
    "SourceLocation",
    "VariableRecord",
    "normalize_path",
    "load_snapshot",
    "snapshot_from_dict",
]
