import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from folder_explorer.cli.db import db_app
from folder_explorer.cli.seed import seed
from folder_explorer.cli.serve import serve
from folder_explorer.cli.tree import tree
from folder_explorer.config import Settings

app = typer.Typer(
    name="folder-explorer",
    help="Folder Explorer CLI: run the API and manage the folder hierarchy.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def _configure(
    log_level: Annotated[str | None, typer.Option(help="Log level (defaults to LOG_LEVEL or INFO).")] = None,
) -> None:
    logging.basicConfig(
        level=(log_level or Settings.from_env().log_level).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
        force=True,
    )


app.add_typer(db_app, name="db")
app.command("serve")(serve)
app.command("seed")(seed)
app.command("tree")(tree)


def main() -> None:
    app()
