"""
Pytest configuration for the editprompt test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Clean budget configuration and CLI flags for every test
- Factories for prompt inputs, events and related files
"""

import os
from typing import List, Optional

import pytest

from editprompt.logging_config import setup_logging
from editprompt.budget import reset_budget_config
from editprompt.cli.config import CLIConfig
from editprompt.schemas import (
    BufferChange,
    OffsetRange,
    PromptInput,
    RelatedExcerpt,
    RelatedFile,
)


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Configure pytest for quiet, machine-mode operation."""
    os.environ.setdefault("EDITPROMPT_MACHINE_MODE", "1")


@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, force=True)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Drop EDITPROMPT_* overrides and cached config before each test."""
    for key in list(os.environ.keys()):
        if key.startswith("EDITPROMPT_") and key != "EDITPROMPT_MACHINE_MODE":
            monkeypatch.delenv(key, raising=False)
    reset_budget_config()
    CLIConfig.reset()
    yield
    reset_budget_config()
    CLIConfig.reset()


# ============================================================================
# INPUT FACTORIES
# ============================================================================

def make_input(
    cursor_excerpt: str,
    editable: tuple,
    cursor_offset: int,
    events: Optional[List[BufferChange]] = None,
    related_files: Optional[List[RelatedFile]] = None,
    **kwargs,
) -> PromptInput:
    """Build a PromptInput for `test.rs` with byte ranges given as (start, end)."""
    return PromptInput(
        cursor_path=kwargs.pop("cursor_path", "test.rs"),
        cursor_excerpt=cursor_excerpt,
        editable_range=OffsetRange(start=editable[0], end=editable[1]),
        cursor_offset=cursor_offset,
        events=events or [],
        related_files=related_files or [],
        **kwargs,
    )


def make_event(path: str, diff: str, old_path: Optional[str] = None, predicted: bool = False) -> BufferChange:
    return BufferChange(
        path=path,
        old_path=old_path if old_path is not None else path,
        diff=diff,
        predicted=predicted,
    )


def make_related_file(path: str, content: str) -> RelatedFile:
    """A related file made of a single excerpt covering all of `content`."""
    rows = len(content.splitlines())
    return RelatedFile(
        path=path,
        max_row=rows,
        excerpts=[RelatedExcerpt(row_range=OffsetRange(start=0, end=rows), text=content)],
    )


@pytest.fixture
def basic_input() -> PromptInput:
    """Excerpt "prefix\\neditable\\nsuffix" with the cursor in the middle of "editable"."""
    return make_input(
        "prefix\neditable\nsuffix",
        (7, 15),
        10,
        events=[make_event("a.rs", "-old\n+new\n")],
        related_files=[make_related_file("related.rs", "fn helper() {}\n")],
    )


@pytest.fixture
def request_file(tmp_path, basic_input):
    """The basic input written to a JSON request file."""
    path = tmp_path / "request.json"
    path.write_text(basic_input.to_json(), encoding="utf-8")
    return path
