"""immerse languages command — list known language tags."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.table import Table

from immerse.cli.utils import config_from_state, get_state
from immerse.core.languages import LANGUAGES
from immerse.utils.console import console


def languages(
    ctx: typer.Context,
    priority_only: Annotated[
        bool,
        typer.Option("--priority", "-p", help="Only show languages in the configured priority."),
    ] = False,
) -> None:
    """List language tags usable in language_priority."""
    priority = config_from_state(get_state(ctx)).condense.language_priority

    table = Table(title=f"Known Languages ({len(LANGUAGES)})")
    table.add_column("Tag", style="bold cyan", width=5)
    table.add_column("Short", width=5)
    table.add_column("Language", width=20)
    table.add_column("Priority", width=8)

    for short, (tag, name) in sorted(LANGUAGES.items(), key=lambda item: item[1][0]):
        rank = priority.index(tag) + 1 if tag in priority else None
        if priority_only and rank is None:
            continue
        table.add_row(tag, short, name.title(), str(rank) if rank else "-")

    console.print(table)
    console.print(
        "\n[dim]Streams are matched on the tag exactly. Short codes in the config "
        "are converted to tags.[/dim]"
    )
