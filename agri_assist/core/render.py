"""
Rendering boundary for model-sourced text.

Model output is untrusted. Before it reaches the terminal, escape sequences and
non-printing control characters are removed; text printed outside Markdown is
additionally escaped so it can't inject Rich markup.
"""

import re

from rich.markdown import Markdown
from rich.markup import escape

# CSI/OSC/other ESC sequences, then remaining C0/C1 controls except tab and newline
_ANSI_ESCAPE = re.compile(r"\x1b(?:\[[0-?]*[ -/]*[@-~]|\][^\x07\x1b]*(?:\x07|\x1b\\)|[@-Z\\-_])")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")


def sanitize_model_text(text: str) -> str:
    """Strip terminal escape sequences and control characters from model text."""
    text = text.replace("\r\n", "\n")
    text = _ANSI_ESCAPE.sub("", text)
    return _CONTROL_CHARS.sub("", text)


def render_markdown(text: str) -> Markdown:
    """Sanitize model text and wrap it for Rich Markdown rendering."""
    return Markdown(sanitize_model_text(text))


def safe_text(text: str) -> str:
    """Sanitize model text and escape Rich markup for console.print."""
    return escape(sanitize_model_text(text))
