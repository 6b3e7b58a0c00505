"""
Prompt Budget Configuration.

Token budgets used when assembling prompts.
All values configurable via EDITPROMPT_* environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


DEFAULT_MAX_PROMPT_TOKENS = 4096                # Whole prompt
DEFAULT_LEGACY_MAX_EVENT_TOKENS = 500           # Legacy edit history
DEFAULT_FORMAT_NAME = "V0114180EditableRegion"

MAX_PROMPT_TOKENS = DEFAULT_MAX_PROMPT_TOKENS


def _env_int(key: str, default: int) -> int:
    """Read a non-negative integer from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _env_str(key: str, default: str) -> str:
    """Read a non-empty string from environment variable."""
    value = os.getenv(key, "").strip()
    return value or default


@dataclass
class PromptBudgetConfig:
    """
    Prompt budget configuration.

    Environment Variables:
        EDITPROMPT_MAX_PROMPT_TOKENS: Budget for a whole prompt (default: 4096)
        EDITPROMPT_LEGACY_MAX_EVENT_TOKENS: Legacy edit history budget (default: 500)
        EDITPROMPT_DEFAULT_FORMAT: Format used when none is requested (default: V0114180EditableRegion)
    """

    max_prompt_tokens: int = field(default_factory=lambda: _env_int(
        "EDITPROMPT_MAX_PROMPT_TOKENS", DEFAULT_MAX_PROMPT_TOKENS
    ))
    legacy_max_event_tokens: int = field(default_factory=lambda: _env_int(
        "EDITPROMPT_LEGACY_MAX_EVENT_TOKENS", DEFAULT_LEGACY_MAX_EVENT_TOKENS
    ))
    default_format: str = field(default_factory=lambda: _env_str(
        "EDITPROMPT_DEFAULT_FORMAT", DEFAULT_FORMAT_NAME
    ))

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary (for JSON output)."""
        return {
            "max_prompt_tokens": self.max_prompt_tokens,
            "legacy_max_event_tokens": self.legacy_max_event_tokens,
            "default_format": self.default_format,
        }


# Global instance for convenience
_default_config: Optional[PromptBudgetConfig] = None


def get_budget_config() -> PromptBudgetConfig:
    """Get the global budget configuration."""
    global _default_config
    if _default_config is None:
        _default_config = PromptBudgetConfig()
    return _default_config


def reset_budget_config() -> None:
    """Reset global config (useful after env var changes or for testing)."""
    global _default_config
    _default_config = None
