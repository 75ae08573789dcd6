"""Terminal output helpers for the nativesearch CLI.

- TTY detection for plain output in pipes and CI logs
- ANSI colors with graceful degradation
"""

from nativesearch.lib.ui.colors import ANSIColors, colorize
from nativesearch.lib.ui.terminal import is_tty

__all__ = [
    "ANSIColors",
    "colorize",
    "is_tty",
]
