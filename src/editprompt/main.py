import typer
from rich.markup import escape
from rich.table import Table

from editprompt import __version__
from editprompt.logging_config import logger, setup_logging
from editprompt.budget import get_budget_config
from editprompt.formats import PromptFormat
from editprompt.cli import prompt
from editprompt.cli.config import CLIConfig
from editprompt.cli.output import get_console, print_json, print_table

app = typer.Typer()
console = get_console()


# Global CLI callback for flags that apply to all commands
@app.callback()
def global_options(
    human: bool = typer.Option(
        False,
        "--human",
        "-H",
        help="Enable human mode: tables and colors (also via EDITPROMPT_HUMAN_MODE env var)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log prompt assembly decisions to stderr"
    ),
):
    """
    editprompt: prompt compiler for next-edit prediction

    Machine mode is DEFAULT (pure data, no formatting).
    Use --human/-H for pretty output.
    """
    if human:
        CLIConfig.set_machine_mode(False)
    if verbose:
        setup_logging(level="DEBUG", suppress_console=False, force=True)
    elif CLIConfig.is_machine_mode():
        # Machine mode is default - suppress console logging
        setup_logging(suppress_console=True, force=True)


# Register prompt commands
app.command(name="render")(prompt.render)
app.command(name="prefill")(prompt.prefill)
app.command(name="clean")(prompt.clean)
app.command(name="check-tokens")(prompt.check_tokens)
app.command(name="legacy")(prompt.legacy)


@app.command()
def version():
    """
    Prints the current version of editprompt.
    """
    typer.echo(f"editprompt v{__version__}")


@app.command()
def formats(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON."),
):
    """
    List the prompt formats and their special tokens.
    """
    default = prompt.resolve_format(None)

    if json_output or CLIConfig.is_machine_mode():
        print_json({
            "default": default.value,
            "formats": [
                {"name": fmt.value, "special_tokens": list(fmt.special_tokens)}
                for fmt in PromptFormat
            ],
        })
        return

    table = Table(title="Prompt formats")
    table.add_column("Name", style="cyan")
    table.add_column("Default")
    table.add_column("Special tokens")
    for fmt in PromptFormat:
        tokens = "\n".join(escape(repr(token)) for token in fmt.special_tokens)
        table.add_row(fmt.value, "*" if fmt is default else "", tokens)
    print_table(table)


@app.command()
def config():
    """
    Show the effective budget configuration.
    """
    logger.debug("Reading budget configuration from environment")
    print_json(get_budget_config().to_dict())


def main():
    app()


if __name__ == "__main__":
    main()
