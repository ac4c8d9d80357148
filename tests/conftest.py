"""Shared test fixtures for Arch Guardian tests."""

import pytest

from arch_guardian.history import (
    FileHistory,
    ModificationRecord,
    ProjectHistory,
    TestRun,
    VisualSample,
)
from arch_guardian.snapshot import (
    DependencyGraph,
    FileSummary,
    ModuleInfo,
    ProjectSnapshot,
)

DAY = 86400
NOW = 1_700_000_000


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def build_snapshot(files=(), modules=(), edges=(), sources=None, generated_at=NOW):
    """Snapshot from summaries; modules default to one per file summary."""
    files = tuple(files)
    if not modules:
        modules = tuple(
            ModuleInfo(path=f.path, exports=f.exports, imports=tuple(i.source for i in f.imports))
            for f in files
        )
    nodes = sorted({m.path for m in modules} | {p for e in edges for p in e})
    return ProjectSnapshot(
        modules=tuple(modules),
        files=files,
        graph=DependencyGraph(nodes=tuple(nodes), edges=tuple(edges)),
        sources={path: tuple(text.splitlines()) for path, text in (sources or {}).items()},
        generated_at=generated_at,
    )


def build_history(changes=None, tests=(), visuals=(), end=NOW, step=DAY):
    """History where each file's descriptions are spaced ``step`` apart, ending at ``end``."""
    files = []
    for path, descriptions in sorted((changes or {}).items()):
        count = len(descriptions)
        records = tuple(
            ModificationRecord(timestamp=end - (count - 1 - i) * step, description=d)
            for i, d in enumerate(descriptions)
        )
        files.append(FileHistory(path=path, records=records))
    return ProjectHistory(files=tuple(files), tests=tuple(tests), visuals=tuple(visuals))


def runs_for(name, passes, failures, start=NOW - 10 * DAY, file=None):
    runs = [True] * passes + [False] * failures
    return [TestRun(name, passed, start + i * 60, file) for i, passed in enumerate(runs)]


def visual_samples(component, stable, unstable, start=NOW - 10 * DAY, file=None):
    flags = [True] * stable + [False] * unstable
    return [VisualSample(component, flag, start + i * 60, file) for i, flag in enumerate(flags)]


@pytest.fixture
def make_snapshot():
    """Factory for ProjectSnapshot values."""
    return build_snapshot


@pytest.fixture
def make_history():
    """Factory for ProjectHistory values."""
    return build_history


@pytest.fixture
def make_test_runs():
    return runs_for


@pytest.fixture
def make_visual_samples():
    return visual_samples


@pytest.fixture
def clean_snapshot():
    """A small project that follows every governance rule."""
    return build_snapshot(
        files=[
            FileSummary(path="src/lib/state/store.ts", exports=("useStore",)),
        ],
        sources={"src/lib/state/store.ts": "export const useStore = create();\n"},
    )


@pytest.fixture
def empty_snapshot():
    return ProjectSnapshot(generated_at=NOW)
