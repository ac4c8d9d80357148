"""Registry inspection commands: layers, concepts, classify."""

import json
from typing import List

import typer
from rich.table import Table

from ..governance import default_registry
from . import app
from ._common import console


@app.command()
def layers(
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    List the architectural layers and their dependency rules.
    """
    registry = default_registry()
    rows = sorted(registry.all_layers(), key=lambda layer: layer.name.value)

    if json_output:
        data = [
            {
                "name": layer.name.value,
                "allowed_dependencies": sorted(d.value for d in layer.allowed_dependencies),
                "forbidden_imports": list(layer.forbidden_imports),
                "allowed_operations": list(layer.allowed_operations),
                "responsibility_boundaries": list(layer.responsibility_boundaries),
            }
            for layer in rows
        ]
        print(json.dumps(data, indent=2))
        return

    table = Table(title="Architecture layers")
    table.add_column("Layer", style="cyan")
    table.add_column("May depend on")
    table.add_column("Forbidden imports", style="red")
    for layer in rows:
        table.add_row(
            layer.name.value,
            ", ".join(sorted(d.value for d in layer.allowed_dependencies)) or "-",
            ", ".join(layer.forbidden_imports) or "-",
        )
    console.print(table)


@app.command()
def concepts(
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    List the registered concepts and their authoritative sources.
    """
    registry = default_registry()
    rows = sorted(registry.all_concepts(), key=lambda c: c.name)

    if json_output:
        data = [
            {
                "name": c.name,
                "kind": c.kind.value,
                "authority_source": c.authority_source,
                "unit": c.unit,
                "reference_frame": c.reference_frame,
                "known_values": list(c.known_values),
            }
            for c in rows
        ]
        print(json.dumps(data, indent=2))
        return

    table = Table(title="Registered concepts")
    table.add_column("Concept", style="cyan")
    table.add_column("Kind")
    table.add_column("Authoritative source", style="green")
    table.add_column("Unit")
    for c in rows:
        table.add_row(c.name, c.kind.value, c.authority_source, c.unit or "-")
    console.print(table)


@app.command()
def classify(
    paths: List[str] = typer.Argument(..., help="Module paths to classify"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Show which layer each path belongs to.

    [bold cyan]Examples:[/bold cyan]

      arch-guardian classify src/components/Earth.tsx src/lib/physics/orbit.ts
    """
    registry = default_registry()
    result = {path: registry.layer_of(path).value for path in paths}

    if json_output:
        print(json.dumps(result, indent=2))
        return

    for path, layer in result.items():
        console.print(f"[cyan]{path}[/cyan] -> {layer}")
