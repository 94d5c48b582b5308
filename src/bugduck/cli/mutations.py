"""
CLI Mutation Commands

inject, restore, kinds, watch
"""

import random
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from bugduck.exceptions import ParseFailure, PrinterError, UnsupportedLanguageError
from bugduck.history import HistoryLedger
from bugduck.logging_config import logger, setup_logging
from bugduck.mutation import CodeEditor, build_catalog, inject_bugs
from bugduck.user_config import clamp_bug_count, get_user_config
from .config import CLIConfig
from .output import fail, get_console, print_json

console = get_console()


def inject_cmd(
    file: Path = typer.Argument(..., help="JavaScript/TypeScript file to sabotage", exists=True, dir_okay=False),
    bugs: Optional[int] = typer.Option(
        None, "--bugs", "-n", help="Bugs to inject (clamped to 1-10, default from config)"
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for a reproducible run"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Compute the mutation but don't write"),
    no_roast: bool = typer.Option(False, "--no-roast", help="Skip the duck's commentary"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Inject plausible bugs into a source file.
    """
    user_config = get_user_config()
    count = clamp_bug_count(bugs) if bugs is not None else user_config.bugs_per_run
    rng = random.Random(seed) if seed is not None else random.Random()

    editor = CodeEditor({"backup_enabled": bool(user_config.get("backup.enabled", True))})
    try:
        original = editor.read(str(file))
    except (OSError, UnicodeDecodeError) as e:
        fail("FILE_READ_ERROR", f"Failed to read {file}: {e}", json_output, input_value=str(file))

    try:
        result = inject_bugs(
            original,
            count,
            file_path=str(file),
            rng=rng,
            weights=user_config.get("mutation.weights"),
        )
    except ParseFailure as e:
        fail("PARSE_FAILURE", str(e), json_output, input_value=str(file))
    except PrinterError as e:
        fail("PRINTER_FAILURE", str(e), json_output, input_value=str(file))
    except UnsupportedLanguageError as e:
        fail("UNSUPPORTED_LANGUAGE", str(e), json_output, input_value=str(file))

    written = False
    backup_path = None
    if result.applied and not dry_run:
        written, backup_path = editor.write(str(file), result.code)
        if not written:
            fail("WRITE_FAILED", f"Failed to write {file}", json_output, input_value=str(file))

        if user_config.get("history.enabled", True) and result.diff is not None:
            HistoryLedger().record(HistoryLedger.build_entry(str(file), result.applied, result.diff))

    # Commentary is fetched only after the file is written
    roast = None
    if result.applied and not no_roast and user_config.get("commentary.enabled", True):
        from bugduck.commentary import get_duck_roast
        roast = get_duck_roast(result.applied)

    if CLIConfig.is_machine_mode() or json_output:
        output_data = {
            "status": "ok",
            "file": str(file),
            "requested": count,
            "applied": [str(k) for k in result.applied],
            "nothing_to_break": result.nothing_to_break,
            "written": written,
            "dry_run": dry_run,
            "backup_path": backup_path,
            "diff": result.diff.model_dump() if result.diff else None,
            "roast": roast,
        }
        print_json(output_data, minified=True)
        return

    if result.nothing_to_break:
        console.print(f"[yellow]Nothing to break in {escape(str(file))}[/yellow]")
        return

    verb = "Would inject" if dry_run else "Injected"
    console.print(f"[green]✓[/green] {verb} {len(result.applied)} bug(s) into [cyan]{escape(str(file))}[/cyan]")
    for kind in result.applied:
        console.print(f"  - {kind}")
    if result.diff:
        console.print(f"[dim]Lines {result.diff.start_line}-{result.diff.end_line}[/dim]")
    if roast:
        console.print(f"\n🦆 [italic]{escape(roast)}[/italic]")


def restore_cmd(
    file: Path = typer.Argument(..., help="File to restore from its latest backup", dir_okay=False),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Restore a file from its most recent pre-injection backup.
    """
    editor = CodeEditor({"backup_enabled": False})
    restored = editor.restore_latest(str(file))
    if restored is None:
        fail(
            "NO_BACKUP",
            f"No backup found for {file}",
            json_output,
            input_value=str(file),
            actionable_fix="Backups are written by 'bugduck inject' when backup.enabled is true",
        )

    if CLIConfig.is_machine_mode() or json_output:
        print_json({"status": "ok", "file": str(file), "backup_path": restored}, minified=True)
    else:
        console.print(f"[green]✓[/green] Restored [cyan]{escape(str(file))}[/cyan] from {escape(restored)}")


def kinds_cmd(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    List the bug kinds and their sampling weights.
    """
    catalog = build_catalog(get_user_config().get("mutation.weights"))

    if CLIConfig.is_machine_mode() or json_output:
        print_json(
            [{"kind": str(r.kind), "weight": r.weight, "description": r.description} for r in catalog],
            minified=True,
        )
        return

    table = Table(title="Bug Kinds")
    table.add_column("Kind", style="cyan")
    table.add_column("Weight", style="green", justify="right")
    table.add_column("Description")
    for rule in catalog:
        table.add_row(str(rule.kind), str(rule.weight), rule.description)
    console.print(table)


def watch_cmd(
    directory: Path = typer.Argument(Path("."), help="Directory to watch", exists=True, file_okay=False),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    no_roast: bool = typer.Option(False, "--no-roast", help="Skip the duck's commentary"),
):
    """
    Inject bugs into every supported file when it is saved.
    """
    from bugduck.watcher import watch

    # Long-running: injection events go to stderr in every mode
    setup_logging(level="INFO", suppress_console=False)
    rng = random.Random(seed) if seed is not None else None
    console.print(f"[bold]🦆 Watching {escape(str(directory))}[/bold] (Ctrl+C to stop)")
    handler = watch(directory, rng=rng, roast=not no_roast)
    logger.debug(f"Watch session ended after {handler.events_processed} events")

    if CLIConfig.is_machine_mode():
        print_json(
            {"status": "ok", "events": handler.events_processed, "injections": handler.injections},
            minified=True,
        )
    else:
        console.print(f"Injected into {handler.injections} save(s)")
