import typer

from bugduck import __version__
from bugduck.logging_config import logger, setup_logging
from bugduck.cli import history, mutations, settings
from bugduck.cli.config import CLIConfig

app = typer.Typer(no_args_is_help=True)


# Global CLI callback for flags that apply to all commands
@app.callback()
def global_options(
    human: bool = typer.Option(
        False,
        "--human",
        "-H",
        help="Enable human mode: tables, colors, emojis (also via BUGDUCK_HUMAN_MODE env var)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every rule attempt"),
):
    """
    bugduck: plausible bug injection for JavaScript and TypeScript.

    Machine mode is the default (plain text and JSON).
    Use --human/-H for pretty output.
    """
    if human:
        CLIConfig.set_machine_mode(False)
        setup_logging(level="DEBUG" if verbose else "WARNING", suppress_console=False)
    else:
        CLIConfig.set_machine_mode(None)
        setup_logging(level="DEBUG" if verbose else "WARNING", suppress_console=True)


app.command(name="inject")(mutations.inject_cmd)
app.command(name="restore")(mutations.restore_cmd)
app.command(name="kinds")(mutations.kinds_cmd)
app.command(name="watch")(mutations.watch_cmd)
app.command(name="history")(history.history_cmd)
app.command(name="stats")(history.stats_cmd)
app.add_typer(settings.app, name="config", help="Show or change configuration")


@app.command()
def version():
    """
    Prints the current version of bugduck.
    """
    logger.debug("version requested")
    typer.echo(f"bugduck v{__version__}")


if __name__ == "__main__":
    app()
