"""ANSI color helpers for CLI output, disabled outside a TTY."""

from nativesearch.lib.ui.terminal import is_tty


class ANSIColors:
    """ANSI escape codes used by the CLI.

    Attributes:
        GREEN: Success lines and scores
        RED: Errors
        YELLOW: Warnings and skipped counts
        CYAN: Result titles
        DIM: URLs and secondary detail
        BOLD: Headers
        RESET: Restore the default style
    """

    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    DIM = "\033[2m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colorize(text: str, color: str, force_tty: bool | None = None) -> str:
    """Wrap text in a color code when writing to a terminal.

    Args:
        text: Text to colorize
        color: ANSI code, e.g. ANSIColors.GREEN
        force_tty: Override TTY detection (for testing)

    Returns:
        Colorized text in TTY mode, plain text otherwise
    """
    use_colors = force_tty if force_tty is not None else is_tty()
    if not use_colors:
        return text
    return f"{color}{text}{ANSIColors.RESET}"
