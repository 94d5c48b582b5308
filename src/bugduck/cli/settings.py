"""
CLI Config Commands

show, set
"""

import json
from typing import Any

import typer

from bugduck.exceptions import ConfigError
from bugduck.user_config import get_user_config
from .config import CLIConfig
from .output import fail, get_console, print_json

app = typer.Typer()
console = get_console()


def _parse_value(raw: str) -> Any:
    """JSON when it parses (numbers, booleans, lists), the raw string otherwise."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@app.command("show")
def show_cmd(
    key: str = typer.Argument(None, help="Dot-separated key, e.g. mutation.bugs_per_run"),
):
    """
    Show the effective configuration, or one key of it.
    """
    config = get_user_config()
    value = config.get(key) if key else config.get_all()
    if key and value is None:
        fail("UNKNOWN_KEY", f"No config value for '{key}'", input_value=key)

    if CLIConfig.is_machine_mode() or isinstance(value, (dict, list)):
        print_json(value)
    else:
        console.print(f"[cyan]{key}[/cyan] = {value}")


@app.command("set")
def set_cmd(
    key: str = typer.Argument(..., help="Dot-separated key"),
    value: str = typer.Argument(..., help="New value (JSON literals are parsed)"),
    is_global: bool = typer.Option(False, "--global", "-g", help="Write ~/.bugduck/config.json instead of the project config"),
):
    """
    Set a configuration value in the project (or global) config file.
    """
    config = get_user_config()
    parsed = _parse_value(value)
    try:
        saved = config.set_global(key, parsed) if is_global else config.set_local(key, parsed)
    except ConfigError as e:
        fail("INVALID_KEY", str(e), input_value=key)
    if not saved:
        fail("CONFIG_WRITE_FAILED", f"Failed to save '{key}'", input_value=key)

    scope = "global" if is_global else "local"
    if CLIConfig.is_machine_mode():
        print_json({"status": "ok", "key": key, "value": parsed, "scope": scope})
    else:
        console.print(f"[green]✓[/green] Set {key} = {parsed!r} ({scope})")
