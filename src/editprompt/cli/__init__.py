"""
CLI Command Modules

Command-line interface of the prompt compiler.
"""

from editprompt.cli import prompt

__all__ = ['prompt']
