"""
Prompt CLI Commands

render, prefill, clean, check-tokens and legacy: the operations of the
prompt compiler over request files (or stdin with "-").
"""

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from editprompt.budget import assemble_prompt, get_budget_config
from editprompt.cleaning import clean_model_output
from editprompt.exceptions import EditPromptError, FormatParseError, InputValidationError
from editprompt.formats import PromptFormat, find_special_tokens
from editprompt.legacy import clean_legacy_output, format_legacy_from_input
from editprompt.prefill import get_prefill
from editprompt.schemas import OffsetRange, PromptInput
from editprompt.cli.config import CLIConfig
from editprompt.cli.output import echo, get_console, print_error, print_json, print_table

console = get_console()

EXIT_SPECIAL_TOKENS = 2


def _read_text(source: str) -> str:
    try:
        if source == CLIConfig.STDIN_PATH:
            return sys.stdin.read()
        path = Path(source)
        if not path.exists():
            print_error(f"File not found: {source}", code="FILE_NOT_FOUND", input_value=source)
            raise typer.Exit(code=1)
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        print_error(f"Input is not valid UTF-8: {e}", code="INVALID_INPUT", input_value=source)
        raise typer.Exit(code=1)


def _load_input(source: str) -> PromptInput:
    try:
        return PromptInput.from_json(_read_text(source))
    except InputValidationError as e:
        print_error(str(e), code="INVALID_INPUT", input_value=source)
        raise typer.Exit(code=1)


def resolve_format(name: Optional[str]) -> PromptFormat:
    if name is None:
        name = get_budget_config().default_format
    try:
        return PromptFormat.parse(name)
    except FormatParseError as e:
        print_error(str(e), code="FORMAT_NOT_FOUND", input_value=name,
                    suggest=[fmt.value for fmt in PromptFormat])
        raise typer.Exit(code=1)


def _parse_range(value: Optional[str], option: str) -> Optional[OffsetRange]:
    if value is None:
        return None
    try:
        start, end = (int(part) for part in value.split(":"))
        return OffsetRange(start=start, end=end)
    except ValueError:
        print_error(f"{option} expects START:END byte offsets, got '{value}'",
                    code="INVALID_RANGE", input_value=value)
        raise typer.Exit(code=1)


def _fail(error: EditPromptError) -> None:
    print_error(str(error), code=type(error).__name__)
    raise typer.Exit(code=1)


def render(
    input_file: str = typer.Argument(..., help="Request JSON file, or '-' for stdin."),
    format_name: Optional[str] = typer.Option(None, "--format", "-f", help="Format name or unique part of it."),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", "-t", min=0, help="Token budget for the whole prompt."),
    stats: bool = typer.Option(False, "--stats", help="Show token accounting."),
    json_output: bool = typer.Option(False, "--json", help="Output prompt, prefill and stats as JSON."),
):
    """
    Compile a request into the prompt payload for a format.

    Examples:
      editprompt render request.json
      editprompt render request.json --format seedcoder --max-tokens 2048
      cat request.json | editprompt render - --json
    """
    prompt_input = _load_input(input_file)
    fmt = resolve_format(format_name)
    try:
        assembled = assemble_prompt(prompt_input, fmt, max_tokens)
        prefill = get_prefill(prompt_input, fmt)
    except EditPromptError as e:
        _fail(e)

    if json_output:
        payload = assembled.to_dict()
        payload["prefill"] = prefill
        print_json(payload)
        return

    echo(assembled.text, nl=False)
    if not stats:
        return

    if CLIConfig.is_machine_mode():
        typer.echo(json.dumps(assembled.stats.to_dict(), separators=(",", ":")), err=True)
        return

    table = Table(title=f"{fmt.value} token accounting")
    table.add_column("Section", style="cyan")
    table.add_column("Tokens", justify="right")
    table.add_column("Kept", justify="right")
    s = assembled.stats
    table.add_row("cursor", str(s.cursor_tokens), "always")
    table.add_row("edit history", str(s.edit_history_tokens), f"{s.events_included}/{s.events_total} events")
    table.add_row("related files", str(s.related_files_tokens),
                  f"{s.related_files_included}/{s.related_files_total} files")
    table.add_row("total", str(s.total_tokens), f"budget {s.max_tokens}")
    console.print()
    print_table(table)
    if s.over_budget:
        console.print("[yellow]Cursor section alone exceeds the budget[/yellow]")


def prefill(
    input_file: str = typer.Argument(..., help="Request JSON file, or '-' for stdin."),
    format_name: Optional[str] = typer.Option(None, "--format", "-f", help="Format name or unique part of it."),
):
    """
    Print the answer prefill for a format (empty for most formats).
    """
    prompt_input = _load_input(input_file)
    fmt = resolve_format(format_name)
    try:
        text = get_prefill(prompt_input, fmt)
    except EditPromptError as e:
        _fail(e)
    echo(text, nl=False)


def clean(
    output_file: str = typer.Argument(..., help="Model output file, or '-' for stdin."),
    format_name: Optional[str] = typer.Option(None, "--format", "-f", help="Format the output was produced for."),
    legacy: bool = typer.Option(False, "--legacy", help="Output comes from the legacy prompt."),
):
    """
    Post-process raw model output.

    Strips the format's end marker, or for --legacy extracts the editable
    region and converts its cursor marker.
    """
    raw = _read_text(output_file)
    if legacy:
        echo(clean_legacy_output(raw), nl=False)
        return
    fmt = resolve_format(format_name)
    echo(clean_model_output(raw, fmt), nl=False)


def check_tokens(
    input_file: str = typer.Argument(..., help="Request JSON file, or '-' for stdin."),
    format_name: Optional[str] = typer.Option(None, "--format", "-f", help="Format name or unique part of it."),
):
    """
    Check whether the cursor excerpt collides with the format's special tokens.

    Exits with status 2 when a collision is found.
    """
    prompt_input = _load_input(input_file)
    fmt = resolve_format(format_name)
    found = find_special_tokens(prompt_input, fmt)

    if CLIConfig.is_machine_mode():
        print_json({"format": fmt.value, "contains_special_tokens": bool(found), "tokens": list(found)})
    elif found:
        console.print(f"[red]Excerpt contains {len(found)} special token(s) of {fmt.value}:[/red]")
        for token in found:
            console.print(f"  {escape(repr(token))}")
    else:
        console.print(f"[green]No {fmt.value} special tokens in excerpt[/green]")

    if found:
        raise typer.Exit(code=EXIT_SPECIAL_TOKENS)


def legacy(
    input_file: str = typer.Argument(..., help="Request JSON file, or '-' for stdin."),
    editable: Optional[str] = typer.Option(None, "--editable", help="Editable byte range START:END (default: request's)."),
    context: Optional[str] = typer.Option(None, "--context", help="Context byte range START:END (default: whole excerpt)."),
):
    """
    Render the legacy instruction prompt for a request.
    """
    prompt_input = _load_input(input_file)
    editable_range = _parse_range(editable, "--editable")
    context_range = _parse_range(context, "--context")
    try:
        text = format_legacy_from_input(prompt_input, editable_range, context_range)
    except EditPromptError as e:
        _fail(e)
    echo(text, nl=False)
