"""
CLI Output Utilities

Machine-aware output functions that adapt based on MACHINE_MODE.
"""

import json
import re
from typing import Any, Optional

import typer
from rich.console import Console as RichConsole
from rich.table import Table

from editprompt.cli.config import CLIConfig


class MachineAwareConsole:
    """
    A Console wrapper that automatically adapts output based on machine mode.
    Acts as a drop-in replacement for rich.console.Console.
    """

    def __init__(self):
        self._rich_console = RichConsole()

    def print(self, *args, **kwargs):
        """Print that respects machine mode."""
        if CLIConfig.is_machine_mode():
            for arg in args:
                if isinstance(arg, str):
                    # Remove rich markup
                    plain = re.sub(r'\[/?[a-z ]+\]', '', arg).strip()
                    if plain:
                        typer.echo(plain)
                elif isinstance(arg, Table) or hasattr(arg, '__rich__'):
                    # Tables are for humans; machine mode uses --json
                    pass
                elif arg:
                    typer.echo(str(arg))
        else:
            self._rich_console.print(*args, **kwargs)

    def __getattr__(self, name):
        """Delegate all other attributes to the rich console."""
        return getattr(self._rich_console, name)


_console = MachineAwareConsole()


def echo(message: str = "", **kwargs) -> None:
    """Print a message verbatim (prompt payloads must not be reformatted)."""
    typer.echo(message, **kwargs)


def print_table(table: Table) -> None:
    """
    Print a rich table respecting machine mode.
    In machine mode, tables are skipped; commands offer --json instead.
    """
    if not CLIConfig.is_machine_mode():
        _console.print(table)


def print_json(data: dict, minified: Optional[bool] = None) -> None:
    """
    Print JSON data respecting machine mode.
    In machine mode, always minifies. In human mode, pretty prints.
    """
    if minified is None:
        minified = CLIConfig.is_machine_mode()

    if minified:
        echo(json.dumps(data, separators=(',', ':')))
    else:
        echo(json.dumps(data, indent=2))


def print_error(message: str, code: Optional[str] = None, input_value: Optional[str] = None,
                suggest: Optional[list] = None) -> None:
    """
    Print an error message respecting machine mode.
    In machine mode, outputs a structured JSON error.

    Args:
        message: Error message
        code: Error code (e.g., "FORMAT_NOT_FOUND")
        input_value: The input that caused the error
        suggest: List of suggestions
    """
    if CLIConfig.is_machine_mode():
        error_obj = {
            "status": "error",
            "message": message
        }
        if code:
            error_obj["code"] = code
        if input_value:
            error_obj["input"] = input_value
        if suggest:
            error_obj["suggestions"] = suggest
        print_json(error_obj)
    else:
        typer.echo(f"Error: {message}", err=True)
        if suggest:
            typer.echo(f"Suggestions: {', '.join(suggest)}", err=True)


def get_console() -> Any:
    """
    Get the console instance for advanced usage.
    Note: Direct console usage should check machine mode.
    """
    return _console
