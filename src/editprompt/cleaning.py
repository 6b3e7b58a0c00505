"""
Model output post-processing for the budgeted formats.
"""

from types import MappingProxyType
from typing import Mapping

from .formats.catalog import PromptFormat
from .formats.markers import MERGE_END_MARKER

# Formats whose models close their answer with a merge end marker
END_MARKERS: Mapping[PromptFormat, str] = MappingProxyType({
    PromptFormat.V0120_GIT_MERGE_MARKERS: MERGE_END_MARKER,
    PromptFormat.V0131_GIT_MERGE_MARKERS_PREFIX: MERGE_END_MARKER,
    PromptFormat.V0211_SEED_CODER: MERGE_END_MARKER,
})


def clean_model_output(output: str, fmt: PromptFormat) -> str:
    """
    Strip the format's trailing end marker from `output`, if present.

    Only the suffix is inspected; markers elsewhere in the text are left alone.
    """
    end_marker = END_MARKERS.get(fmt)
    if end_marker and output.endswith(end_marker):
        return output[: -len(end_marker)]
    return output
