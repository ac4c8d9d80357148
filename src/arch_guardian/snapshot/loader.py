"""Build a ProjectSnapshot from its JSON document form."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from ..exceptions import ErrorCode, InputFormatError
from ..logging_config import get_logger
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
)

logger = get_logger(__name__)


def load_snapshot(path: Path) -> ProjectSnapshot:
    """Read a snapshot JSON file.

    Raises:
        InputFormatError: If the file is unreadable or not a snapshot document
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise InputFormatError(
            f"Cannot read snapshot {path}: {e}",
            ErrorCode.AG300,
            context={"path": str(path)},
            recovery_hint="Regenerate the snapshot with the source-analysis step",
        )
    return snapshot_from_dict(data)


def snapshot_from_dict(data: Any) -> ProjectSnapshot:
    """Convert a decoded snapshot document into a ProjectSnapshot."""
    if not isinstance(data, dict):
        raise InputFormatError("Snapshot document must be an object", ErrorCode.AG300)

    try:
        modules = tuple(_module(m) for m in data.get("modules", []))
        files = tuple(_file(f) for f in data.get("files", []))
        graph_data = data.get("graph") or {}
        graph = DependencyGraph(
            nodes=tuple(graph_data.get("nodes", [])),
            edges=tuple((e["from"], e["to"]) for e in graph_data.get("edges", [])),
        )
        sources = {
            path: tuple(text.splitlines()) if isinstance(text, str) else tuple(text)
            for path, text in (data.get("sources") or {}).items()
        }
        generated_at = data.get("generated_at")
        if generated_at is not None:
            generated_at = int(generated_at)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise InputFormatError(f"Malformed snapshot document: {e}", ErrorCode.AG300)

    logger.debug(f"Loaded snapshot: {len(modules)} modules, {len(files)} files")
    return ProjectSnapshot(
        modules=modules,
        files=files,
        graph=graph,
        sources=sources,
        generated_at=generated_at,
    )


def _location(data: Optional[dict], default_file: str) -> Optional[SourceLocation]:
    if data is None:
        return None
    return SourceLocation(
        file=data.get("file", default_file),
        line=int(data.get("line", 1)),
        column=int(data.get("column", 1)),
    )


def _module(data: dict) -> ModuleInfo:
    return ModuleInfo(
        path=data["path"],
        exports=tuple(data.get("exports", [])),
        imports=tuple(data.get("imports", [])),
        dependencies=tuple(data.get("dependencies", [])),
    )


def _file(data: dict) -> FileSummary:
    path = data["path"]
    return FileSummary(
        path=path,
        imports=tuple(
            ImportRecord(
                source=i["source"],
                names=tuple(i.get("names", [])),
                location=_location(i.get("location"), path),
            )
            for i in data.get("imports", [])
        ),
        exports=tuple(data.get("exports", [])),
        functions=tuple(
            FunctionRecord(
                name=f["name"],
                parameters=tuple(f.get("parameters", [])),
                location=_location(f.get("location"), path),
                complexity=int(f.get("complexity", 1)),
                exported=bool(f.get("exported", False)),
            )
            for f in data.get("functions", [])
        ),
        variables=tuple(
            VariableRecord(
                name=v["name"],
                location=_location(v.get("location"), path),
                value=None if v.get("value") is None else str(v["value"]),
                exported=bool(v.get("exported", False)),
            )
            for v in data.get("variables", [])
        ),
        classes=tuple(
            ClassRecord(
                name=c["name"],
                location=_location(c.get("location"), path),
                exported=bool(c.get("exported", False)),
            )
            for c in data.get("classes", [])
        ),
        computations=tuple(
            ComputationRecord(
                kind=c["kind"],
                description=c.get("description", ""),
                location=_location(c.get("location"), path),
                variables=tuple(c.get("variables", [])),
            )
            for c in data.get("computations", [])
        ),
    )
