"""Command-line entrypoints for SimpLab."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional

import typer

from simplab.catalog import DEFAULT_CATALOG, SubstanceCatalog, catalog_from_mapping
from simplab.classifier import classify
from simplab.containers import ContainerManager
from simplab.errors import CatalogError, ScriptError, SimpLabError
from simplab.history import format_for_external_analysis
from simplab.persistence import sqlite_store
from simplab.rules import DEFAULT_RULE_SET, RuleSet, build_rule_set
from simplab.session import LabSession
from simplab.settings import LabSettings, load_settings

app = typer.Typer(add_completion=False)


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging.")
    ] = False,
) -> None:
    """Simulate simple reactions between catalog substances."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_catalog(catalog_file: Optional[Path]) -> tuple[SubstanceCatalog, RuleSet]:
    if catalog_file is None:
        return DEFAULT_CATALOG, DEFAULT_RULE_SET
    try:
        with open(catalog_file, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogError(f"Cannot read catalog {catalog_file}: {exc}") from None
    catalog = catalog_from_mapping(data, base=DEFAULT_CATALOG)
    return catalog, build_rule_set(catalog)


def _echo_json(payload: Any, output: Optional[Path] = None) -> None:
    json_output = json.dumps(payload, ensure_ascii=False, indent=2)
    typer.echo(json_output)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(json_output)


CatalogOption = Annotated[
    Optional[Path],
    typer.Option("--catalog", help="JSON file with extra substances."),
]


@app.command()
def catalog(
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON.")] = False,
    catalog_file: CatalogOption = None,
) -> None:
    """List the substances available to containers."""
    try:
        substances, _ = _load_catalog(catalog_file)
    except SimpLabError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    if as_json:
        _echo_json([s.to_dict() for s in substances])
        return
    for s in substances:
        typer.echo(f"{s.id:<16} {s.name:<24} {s.formula:<12} {s.category.value:<10} pH {s.ph:g}")


@app.command()
def mix(
    substances: Annotated[List[str], typer.Argument(help="Substance identifiers.")],
    export: Annotated[
        bool, typer.Option("--export", help="Print the external analysis record.")
    ] = False,
    container_id: Annotated[
        str, typer.Option(help="Container id used in the export record.")
    ] = "beaker-1",
    catalog_file: CatalogOption = None,
) -> None:
    """Classify a set of substances and print the reaction result."""
    try:
        substance_catalog, rules = _load_catalog(catalog_file)
        result = classify(substances, substance_catalog, rules)
    except SimpLabError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    if export:
        _echo_json(
            format_for_external_analysis(container_id, substances, result, substance_catalog)
        )
    else:
        _echo_json(result.to_dict())


def _apply_step(session: LabSession, step: Dict[str, Any], active: Optional[str]) -> Optional[str]:
    if not isinstance(step, dict):
        raise ScriptError(f"Step must be an object, not {type(step).__name__}")
    op = step.get("op")
    container_id = step.get("container", active)

    if op == "new":
        return session.new_container(step.get("label")).id
    if container_id is None:
        raise ScriptError(f"Operation {op!r} needs a container but none is open")

    if op == "add":
        if "substance" not in step:
            raise ScriptError("Operation 'add' needs a 'substance'")
        session.add_substance(container_id, step["substance"])
    elif op == "remove_last":
        session.remove_last(container_id)
    elif op == "clear":
        session.clear(container_id)
    elif op == "record":
        session.record_run(container_id)
    elif op == "discard":
        session.discard(container_id)
        return None if container_id == active else active
    else:
        raise ScriptError(f"Unknown operation: {op!r}")
    return container_id


@app.command()
def run(
    script_file: Annotated[
        Path, typer.Argument(help="JSON script of container operations.")
    ],
    settings_file: Annotated[
        Optional[Path], typer.Option("--settings", help="JSON lab settings.")
    ] = None,
    session_file: Annotated[
        Optional[Path], typer.Option(help="SQLite file to persist the session.")
    ] = None,
    output: Annotated[
        Optional[Path], typer.Option(help="Path to save output JSON.")
    ] = None,
    catalog_file: CatalogOption = None,
) -> None:
    """Replay container operations and print history and exports."""
    with open(script_file, "r") as f:
        script = json.load(f)
    steps = script["steps"] if isinstance(script, dict) else script

    try:
        settings = load_settings(settings_file) if settings_file else LabSettings()
        substance_catalog, rules = _load_catalog(catalog_file)
    except SimpLabError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)
    session = LabSession(ContainerManager(settings, substance_catalog, rules))

    errors = []
    active: Optional[str] = None
    for index, step in enumerate(steps):
        try:
            active = _apply_step(session, step, active)
        except SimpLabError as exc:
            # Rejected operations leave state unchanged; keep replaying.
            typer.echo(f"Step {index}: {exc}", err=True)
            errors.append({"step": index, "error": str(exc)})

    exports = [
        session.format_for_external_analysis(c.id) for c in session.manager.containers
    ]
    payload = {
        "history": session.history.to_list(),
        "containers": exports,
        "errors": errors,
    }

    if session_file is not None:
        connection = sqlite_store.connect(session_file)
        sqlite_store.ensure_schema(connection)
        session_id = sqlite_store.create_session(
            connection,
            name=script_file.stem,
            notes="Recorded from SimpLab CLI run.",
        )
        for entry in session.history:
            sqlite_store.save_history_entry(connection, session_id, entry)
        for record in exports:
            sqlite_store.save_export(connection, session_id, record)
        connection.close()
        payload["session_id"] = session_id

    _echo_json(payload, output)


@app.command()
def history(
    session_file: Annotated[Path, typer.Argument(help="SQLite session file.")],
    session_id: Annotated[
        Optional[int], typer.Option(help="Session to show; defaults to the latest.")
    ] = None,
) -> None:
    """Print recorded history entries from a session file."""
    if not session_file.exists():
        typer.echo(f"Error: {session_file} does not exist", err=True)
        raise typer.Exit(code=1)
    connection = sqlite_store.connect(session_file)
    sqlite_store.ensure_schema(connection)
    sessions = sqlite_store.list_sessions(connection)
    if not sessions:
        connection.close()
        typer.echo("Error: no sessions recorded", err=True)
        raise typer.Exit(code=1)
    if session_id is None:
        session_id = sessions[-1]["id"]
    entries = sqlite_store.load_history(connection, session_id)
    connection.close()
    _echo_json({"session_id": session_id, "history": entries})
