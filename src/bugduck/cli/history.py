"""
CLI History Commands

history, stats
"""

from datetime import datetime

import typer
from rich.markup import escape
from rich.table import Table

from bugduck.history import HistoryLedger
from .config import CLIConfig
from .output import get_console, print_json

console = get_console()


def history_cmd(
    limit: int = typer.Option(CLIConfig.DEFAULT_HISTORY_LIMIT, "--limit", "-n", help="Number of entries to show"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the most recent injections, newest first.
    """
    entries = HistoryLedger().recent(limit=limit)

    if CLIConfig.is_machine_mode() or json_output:
        print_json([e.model_dump(mode="json") for e in entries], minified=True)
        return

    if not entries:
        console.print("[dim]No injections recorded yet.[/dim]")
        return

    console.print(f"[bold]Injection History[/bold] (showing {len(entries)} most recent)\n")
    for entry in entries:
        when = datetime.fromtimestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M:%S")
        console.print(f"[cyan]{entry.id[:8]}[/cyan] - {when}")
        console.print(f"  {escape(entry.file_path)}:{entry.start_line}-{entry.end_line}")
        console.print(f"  Bugs: {', '.join(str(b) for b in entry.bugs)}")
        console.print()


def stats_cmd(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show how many bugs of each kind have been injected.
    """
    stats = HistoryLedger().stats()

    if CLIConfig.is_machine_mode() or json_output:
        print_json(stats, minified=True)
        return

    table = Table(title="Injection Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Total Runs", str(stats["total_runs"]))
    table.add_row("Total Bugs", str(stats["total_bugs"]))
    table.add_row("Files Touched", str(stats["files_touched"]))
    console.print(table)

    if stats["bugs_by_kind"]:
        console.print("\n[bold]Bugs by Kind:[/bold]")
        for kind, count in stats["bugs_by_kind"].items():
            console.print(f"  {kind}: {count}")
