"""Terminal detection utilities."""

import sys


def is_tty() -> bool:
    """Check if stdout is connected to a terminal.

    Colored output is only used for interactive terminals so piped search
    results and CI logs stay plain text.
    """
    return sys.stdout.isatty()
