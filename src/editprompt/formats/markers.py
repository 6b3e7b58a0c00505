"""
Literal marker vocabulary shared by the prompt formats.

These strings are part of the wire format and must match the models'
special tokens byte for byte.
"""

CURSOR_MARKER = "<|user_cursor|>"

# Qwen-style fill-in-the-middle tokens
FIM_PREFIX = "<|fim_prefix|>"
FIM_SUFFIX = "<|fim_suffix|>"
FIM_MIDDLE = "<|fim_middle|>"
FILE_SEP = "<|file_sep|>"

# Git merge-conflict markers around the editable region
MERGE_START_MARKER = "<<<<<<< CURRENT\n"
MERGE_SEPARATOR = "=======\n"
MERGE_END_MARKER = ">>>>>>> UPDATED\n"

# Seed-Coder SPM tokens
SEED_FIM_SUFFIX = "<[fim-suffix]>"
SEED_FIM_PREFIX = "<[fim-prefix]>"
SEED_FIM_MIDDLE = "<[fim-middle]>"
SEED_FILE_MARKER = "<filename>"

# Names of the edit history pseudo-file
EDIT_HISTORY_NAME = "edit history"
SEED_EDIT_HISTORY_NAME = "edit_history"

ELLIPSIS_LINE = "...\n"
PREDICTION_ACCEPTED_LINE = "// User accepted prediction:\n"
