"""Completion command for book-catalog-tool."""

from enum import Enum

import typer
from click.shell_completion import BashComplete, FishComplete, ShellComplete, ZshComplete

completion_app = typer.Typer(help="Generate shell completion scripts.")

PROG_NAME = "book-catalog-tool"
COMPLETE_VAR = "_BOOK_CATALOG_TOOL_COMPLETE"


class Shell(str, Enum):
    """Supported shell types for completion."""

    bash = "bash"
    zsh = "zsh"
    fish = "fish"


_COMPLETION_CLASSES: dict[Shell, type[ShellComplete]] = {
    Shell.bash: BashComplete,
    Shell.zsh: ZshComplete,
    Shell.fish: FishComplete,
}


@completion_app.command(name="generate")
def generate_completion(
    shell: Shell = typer.Argument(..., help="Shell type (bash, zsh, fish)"),
) -> None:
    """Generate shell completion script.

    \b
    # Bash (add to ~/.bashrc):
    eval "$(book-catalog-tool completion generate bash)"

    \b
    # Zsh (add to ~/.zshrc):
    eval "$(book-catalog-tool completion generate zsh)"

    \b
    # Fish:
    book-catalog-tool completion generate fish > ~/.config/fish/completions/book-catalog-tool.fish
    """
    from book_catalog_tool.cli import app

    completer = _COMPLETION_CLASSES[shell](
        cli=typer.main.get_command(app),
        ctx_args={},
        prog_name=PROG_NAME,
        complete_var=COMPLETE_VAR,
    )
    typer.echo(completer.source())
