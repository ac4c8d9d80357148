"""Project snapshot consumed by the governance detectors.

The snapshot is produced by an external source-analysis step. It carries
the module list, per-file structural summaries, a dependency graph and the
raw source lines used by the keyword and regex scans. Everything here is
immutable for the duration of an analysis run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


def normalize_path(path: str) -> str:
    """Normalize separators and strip leading './' so path fragments compare."""
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


@dataclass(frozen=True, order=True)
class SourceLocation:
    """A position in a source file (1-based line and column)."""

    file: str
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True)
class ImportRecord:
    """One import statement.

    Attributes:
        source: The import path as written (e.g. "../lib/physics/orbit").
        names: Identifiers brought in by the import.
        location: Where the import statement sits.
    """

    source: str
    names: tuple[str, ...] = ()
    location: Optional[SourceLocation] = None


@dataclass(frozen=True)
class FunctionRecord:
    """A function or method definition."""

    name: str
    parameters: tuple[str, ...] = ()
    location: Optional[SourceLocation] = None
    complexity: int = 1
    exported: bool = False

    @property
    def parameter_count(self) -> int:
        return len(self.parameters)


@dataclass(frozen=True)
class VariableRecord:
    """A variable or constant declaration.

    ``value`` holds the initializer text when the extractor could read it.
    """

    name: str
    location: Optional[SourceLocation] = None
    value: Optional[str] = None
    exported: bool = False

    @property
    def numeric_value(self) -> Optional[float]:
        if self.value is None:
            return None
        try:
            return float(self.value.replace("_", ""))
        except ValueError:
            return None


@dataclass(frozen=True)
class ClassRecord:
    """A class definition."""

    name: str
    location: Optional[SourceLocation] = None
    exported: bool = False


@dataclass(frozen=True)
class ComputationRecord:
    """A coarse classification of a computation found in a file.

    ``kind`` is one of "arithmetic", "trigonometric" or "physics".
    """

    kind: str
    description: str = ""
    location: Optional[SourceLocation] = None
    variables: tuple[str, ...] = ()


@dataclass(frozen=True)
class FileSummary:
    """Structural summary of one source file."""

    path: str
    imports: tuple[ImportRecord, ...] = ()
    exports: tuple[str, ...] = ()
    functions: tuple[FunctionRecord, ...] = ()
    variables: tuple[VariableRecord, ...] = ()
    classes: tuple[ClassRecord, ...] = ()
    computations: tuple[ComputationRecord, ...] = ()


@dataclass(frozen=True)
class ModuleInfo:
    """A module as seen by the dependency resolver."""

    path: str
    exports: tuple[str, ...] = ()
    imports: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class DependencyGraph:
    """Module-level import graph. Edges point from importer to imported."""

    nodes: tuple[str, ...] = ()
    edges: tuple[tuple[str, str], ...] = ()

    def successors(self, node: str) -> list[str]:
        return [target for source, target in self.edges if source == node]


@dataclass(frozen=True)
class ProjectSnapshot:
    """Everything the detectors may look at for one analysis run."""

    modules: tuple[ModuleInfo, ...] = ()
    files: tuple[FileSummary, ...] = ()
    graph: DependencyGraph = field(default_factory=DependencyGraph)
    sources: dict[str, tuple[str, ...]] = field(default_factory=dict)
    generated_at: Optional[int] = None

    def file(self, path: str) -> Optional[FileSummary]:
        """Return the structural summary for ``path``, if one was extracted."""
        for summary in self.files:
            if summary.path == path:
                return summary
        return None

    def source_lines(self, path: str) -> tuple[str, ...]:
        return self.sources.get(path, ())

    def all_paths(self) -> list[str]:
        """Every module or file path in the snapshot, deduplicated and sorted."""
        paths = {m.path for m in self.modules}
        paths.update(f.path for f in self.files)
        return sorted(paths)

    def import_sites(self, path: str) -> list[ImportRecord]:
        """Import statements of one module, each with a location.

        Uses the file summary when one exists. Otherwise the module's bare
        import strings are reported at the top of the file.
        """
        summary = self.file(path)
        if summary is not None and summary.imports:
            return [
                imp
                if imp.location is not None
                else ImportRecord(imp.source, imp.names, SourceLocation(path))
                for imp in summary.imports
            ]
        for module in self.modules:
            if module.path == path:
                return [ImportRecord(source, (), SourceLocation(path)) for source in module.imports]
        return []
