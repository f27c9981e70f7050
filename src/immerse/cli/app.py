"""immerse CLI entry point."""

from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

from immerse import __version__
from immerse.cli.add import add
from immerse.cli.condense import condense
from immerse.cli.languages import languages
from immerse.cli.library import archive, reshuffle, rotate
from immerse.cli.probe import probe
from immerse.cli.utils import CliState
from immerse.utils.console import configure_logging

app = typer.Typer(
    name="immerse",
    help="immerse — condensed immersion audio from your videos.",
    no_args_is_help=True,
)


class Command(str, Enum):
    ADD = "add"
    CONDENSE = "condense"
    ARCHIVE = "archive"
    RESHUFFLE = "reshuffle"
    ROTATE = "rotate"
    PROBE = "probe"
    LANGUAGES = "languages"


COMMANDS: dict[Command, Callable[..., None]] = {
    Command.ADD: add,
    Command.CONDENSE: condense,
    Command.ARCHIVE: archive,
    Command.RESHUFFLE: reshuffle,
    Command.ROTATE: rotate,
    Command.PROBE: probe,
    Command.LANGUAGES: languages,
}


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"immerse {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing output files."),
    ] = False,
    no_condense: Annotated[
        bool,
        typer.Option("--no-condense", "-n", help="Skip condensing; copy the full audio."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Extra config file (TOML) applied last."),
    ] = None,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """immerse — condensed immersion audio from your videos."""
    # Shell exports take precedence over .env values
    load_dotenv(override=False)
    configure_logging(verbose)
    ctx.obj = CliState(
        force=force,
        no_condense=no_condense,
        verbose=verbose,
        config_file=config_file,
    )


for _command, _handler in COMMANDS.items():
    app.command(_command.value)(_handler)
