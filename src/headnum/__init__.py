r"""
Outline numbering and tables of contents for Markdown headings.

Usage::

    from headnum import Command, process_text

    result = process_text("# Intro\n## Background\n", Command.number)
    print(result.text)  # "# 1. Intro\n## 1.1. Background\n"
"""

from headnum.document import MarkdownDocument
from headnum.headnum_api import Command, CommandResult, process_file, process_text
from headnum.settings import DEFAULT_SETTINGS, NumberingSettings

__all__ = [
    "DEFAULT_SETTINGS",
    "Command",
    "CommandResult",
    "MarkdownDocument",
    "NumberingSettings",
    "process_file",
    "process_text",
]
