"""
CLI Output Utilities

Machine-aware output functions that adapt based on machine mode.
"""

import json
import re
from typing import Any, Optional

import typer
from rich.console import Console as RichConsole
from rich.table import Table

from bugduck.cli.config import CLIConfig

_MARKUP = re.compile(r'\[/?[a-z][a-z0-9 _#-]*\]')
_EMOJI = re.compile(
    r'[\U0001F300-\U0001F9FF\U00002600-\U000027BF\U0000FE00-\U0000FE0F\U0001FA00-\U0001FA6F]'
)


class MachineAwareConsole:
    """
    A Console wrapper that automatically adapts output based on machine mode.
    Acts as a drop-in replacement for rich.console.Console.
    """

    def __init__(self):
        self._rich_console = RichConsole()

    def print(self, *args, **kwargs):
        """Print that respects machine mode."""
        if not CLIConfig.is_machine_mode():
            self._rich_console.print(*args, **kwargs)
            return

        for arg in args:
            if isinstance(arg, str):
                # Remove rich markup and emojis
                plain = _EMOJI.sub('', _MARKUP.sub('', arg)).strip()
                if plain:
                    typer.echo(plain)
            elif isinstance(arg, Table) or hasattr(arg, '__rich__'):
                # Tables are human-only; machine callers use --json
                pass
            elif arg:
                typer.echo(str(arg))

    def __getattr__(self, name):
        """Delegate all other attributes to the rich console."""
        return getattr(self._rich_console, name)


# Console instance for rich output (machine-aware)
_console = MachineAwareConsole()


def print_json(data: Any, minified: Optional[bool] = None) -> None:
    """
    Print JSON data respecting machine mode.
    In machine mode, always minifies. In human mode, pretty prints.
    """
    if minified is None:
        minified = CLIConfig.is_machine_mode()

    if minified:
        typer.echo(json.dumps(data, separators=(',', ':'), ensure_ascii=False, default=str))
    else:
        typer.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def structured_error(code: str, message: str, input_value: Optional[str] = None,
                     suggestions: Optional[list] = None, actionable_fix: Optional[str] = None) -> dict:
    """
    Create a structured error object for machine mode.

    Args:
        code: Error code (e.g., "PARSE_FAILURE", "FILE_NOT_FOUND")
        message: Human-readable error message
        input_value: The input that caused the error
        suggestions: List of alternative suggestions
        actionable_fix: Command to fix the issue

    Returns:
        Structured error dictionary
    """
    error_obj = {
        "status": "error",
        "code": code,
        "message": message
    }
    if input_value:
        error_obj["input"] = input_value
    if suggestions:
        error_obj["suggestions"] = suggestions
    if actionable_fix:
        error_obj["actionable_fix"] = actionable_fix
    return error_obj


def fail(code: str, message: str, json_output: bool = False, **kwargs) -> None:
    """
    Report an error in the active output mode and exit with status 1.
    """
    if CLIConfig.is_machine_mode() or json_output:
        print_json(structured_error(code, message, **kwargs), minified=True)
    else:
        _console.print(f"[red]Error: {message}[/red]")
        if kwargs.get("actionable_fix"):
            _console.print(f"[dim]Try: {kwargs['actionable_fix']}[/dim]")
    raise typer.Exit(code=1)


def get_console() -> MachineAwareConsole:
    """
    Get the console instance for advanced usage.
    Note: Direct console usage should check machine mode.
    """
    return _console
