"""Build a ProjectHistory from its JSON document form.

Document shape::

    {
      "files": {"src/x.ts": [{"timestamp": 1700000000, "description": "fix tilt"}]},
      "tests": [{"test_name": "earth", "passed": true, "timestamp": 1700000000}],
      "visuals": [{"component": "Earth", "stable": false, "timestamp": 1700000000}]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..exceptions import ErrorCode, InputFormatError
from .models import FileHistory, ModificationRecord, ProjectHistory, TestRun, VisualSample


def load_history(path: Path) -> ProjectHistory:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise InputFormatError(
            f"Cannot read history {path}: {e}",
            ErrorCode.AG301,
            context={"path": str(path)},
        )
    return history_from_dict(data)


def history_from_dict(data: Any) -> ProjectHistory:
    if not isinstance(data, dict):
        raise InputFormatError("History document must be an object", ErrorCode.AG301)

    try:
        files = tuple(
            FileHistory(
                path=path,
                records=tuple(
                    ModificationRecord(
                        timestamp=int(r["timestamp"]),
                        description=r.get("description", ""),
                        author=r.get("author", ""),
                        change_kind=r.get("change_kind", "modify"),
                    )
                    for r in records
                ),
            )
            for path, records in sorted((data.get("files") or {}).items())
        )
        tests = tuple(
            TestRun(
                test_name=t["test_name"],
                passed=bool(t["passed"]),
                timestamp=int(t["timestamp"]),
                file=t.get("file"),
            )
            for t in data.get("tests", [])
        )
        visuals = tuple(
            VisualSample(
                component=v["component"],
                stable=bool(v["stable"]),
                timestamp=int(v["timestamp"]),
                file=v.get("file"),
            )
            for v in data.get("visuals", [])
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise InputFormatError(f"Malformed history document: {e}", ErrorCode.AG301)

    return ProjectHistory(files=files, tests=tests, visuals=visuals)
