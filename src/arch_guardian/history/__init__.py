"""Modification, test and visual history."""

from .loader import history_from_dict, load_history
from .models import (
    EMPTY_HISTORY,
    FileHistory,
    ModificationRecord,
    ProjectHistory,
    StabilityMetrics,
    TestRun,
    VisualSample,
)

__all__ = [
    "EMPTY_HISTORY",
    "FileHistory",
    "ModificationRecord",
    "ProjectHistory",
    "StabilityMetrics",
    "TestRun",
    "VisualSample",
    "history_from_dict",
    "load_history",
]
