"""Tests for the arch-guardian command line."""

import json

import pytest
from typer.testing import CliRunner

from arch_guardian import __version__
from arch_guardian.cli import app

runner = CliRunner()

EARTH = "src/components/Earth.tsx"

VIOLATING = {
    "generated_at": 1700000000,
    "files": [
        {
            "path": EARTH,
            "imports": [
                {"source": "../../lib/astronomy/constants/axialTilt", "location": {"line": 1, "column": 1}}
            ],
        }
    ],
}

CLEAN = {
    "generated_at": 1700000000,
    "files": [{"path": "src/lib/state/store.ts", "exports": ["useStore"]}],
}


@pytest.fixture
def write_json(tmp_path):
    def write(name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return str(path)

    return write


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"Arch Guardian version {__version__}" in result.stdout


class TestAnalyzeCommand:
    """arch-guardian analyze SNAPSHOT"""

    def test_json_output(self, write_json):
        result = runner.invoke(app, ["analyze", write_json("s.json", VIOLATING), "--json", "-q"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["compliance"]["overall"] == 65
        assert data["summary"]["by_severity"]["critical"] == 1

    def test_markdown_output(self, write_json):
        result = runner.invoke(app, ["analyze", write_json("s.json", VIOLATING), "--markdown", "-q"])
        assert result.exit_code == 0
        assert "# Architecture Governance Report" in result.stdout

    def test_rich_output(self, write_json):
        result = runner.invoke(app, ["analyze", write_json("s.json", CLEAN), "-q"])
        assert result.exit_code == 0
        assert "No governance violations found." in result.stdout

    def test_json_and_markdown_conflict(self, write_json):
        result = runner.invoke(app, ["analyze", write_json("s.json", CLEAN), "--json", "--markdown"])
        assert result.exit_code == 2

    @pytest.mark.parametrize(
        "data, fail_on, code",
        [
            (VIOLATING, "high", 1),
            (VIOLATING, "critical", 1),
            (VIOLATING, "any", 1),
            (CLEAN, "any", 0),
        ],
    )
    def test_fail_on(self, write_json, data, fail_on, code):
        result = runner.invoke(app, ["analyze", write_json("s.json", data), "--json", "-q", "--fail-on", fail_on])
        assert result.exit_code == code

    def test_spec_filter(self, write_json):
        result = runner.invoke(
            app, ["analyze", write_json("s.json", VIOLATING), "--json", "-q", "--spec", "Spec-3"]
        )
        assert result.exit_code == 0
        assert list(json.loads(result.stdout)["findings"]) == ["boundary-violation"]

    def test_previous_report_counts_fix_attempts(self, write_json, tmp_path):
        snapshot = write_json("s.json", VIOLATING)
        first = runner.invoke(app, ["analyze", snapshot, "--json", "-q"])
        previous = tmp_path / "previous.json"
        previous.write_text(first.stdout)

        second = runner.invoke(app, ["analyze", snapshot, "--json", "-q", "--previous", str(previous)])

        assert second.exit_code == 0
        findings = json.loads(second.stdout)["findings"]["layer-violation"]
        assert {f["fix_attempts"] for f in findings} == {1}

    def test_history_option(self, write_json):
        history = write_json(
            "h.json",
            {"files": {EARTH: [{"timestamp": 1699990000 + i, "description": "fix"} for i in range(3)]}},
        )
        result = runner.invoke(
            app, ["analyze", write_json("s.json", CLEAN), "--history", history, "--json", "-q"]
        )
        assert result.exit_code == 0
        assert "structural-failure" in json.loads(result.stdout)["findings"]

    def test_malformed_snapshot(self, tmp_path):
        path = tmp_path / "s.json"
        path.write_text("{broken")
        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1
        assert "AG300" in result.output

    def test_missing_snapshot(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.json")])
        assert result.exit_code == 2


class TestRegistryCommands:
    def test_layers_json(self):
        result = runner.invoke(app, ["layers", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [layer["name"] for layer in data] == [
            "computation-domain",
            "computation-physics",
            "constants",
            "infrastructure",
            "presentation",
        ]
        constants = data[2]
        assert constants["forbidden_imports"] == ["*"]
        assert constants["allowed_dependencies"] == []

    def test_concepts_json(self):
        result = runner.invoke(app, ["concepts", "--json"])
        data = {c["name"]: c for c in json.loads(result.stdout)}
        assert data["earth_axial_tilt"]["authority_source"] == "lib/astronomy/constants/axialTilt.ts"
        assert data["earth_axial_tilt"]["unit"] == "degrees"

    def test_classify_json(self):
        result = runner.invoke(app, ["classify", EARTH, "src/lib/physics/orbit.ts", "three", "--json"])
        assert json.loads(result.stdout) == {
            EARTH: "presentation",
            "src/lib/physics/orbit.ts": "computation-physics",
            "three": "infrastructure",
        }

    def test_tables(self):
        result = runner.invoke(app, ["layers"])
        assert result.exit_code == 0
        assert "presentation" in result.stdout
