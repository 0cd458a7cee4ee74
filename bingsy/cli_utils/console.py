"""
bingsy console utilities

This module provides application-wide access to Rich Console objects for
writing to stdout and stderr. Every message bingsy prints to the user goes
through one of the formatting helpers below so that --quiet can silence
them in one place.
"""

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

bingsy_theme = Theme(
    {"warning": "orange_red1", "fail": "bold red", "confirm": "", "describe": ""}
)

console = Console(theme=bingsy_theme)
error_console = Console(theme=bingsy_theme, stderr=True)
log_console = Console(theme=bingsy_theme, stderr=True)


"""
Formatting helpers
"""


def warn(msg: str):
    """
    Format msg and print to stderr.
    """

    error_console.print(
        f":exclamation_mark-emoji: [bold]warning: [/] {escape(msg)}", style="warning"
    )


def describe(msg: str, **kwargs):
    """
    Format descriptive msg and print to stdout.
    """

    console.print(f"{msg}", style="describe", **kwargs)


def confirm_success(msg: str, **kwargs):
    """
    Format confirmation msg and print to stdout. Accept any additional kwargs that console.print from
    rich module exposes.
    """

    console.print(f"{msg}", style="confirm", **kwargs)


def fail(msg: str):
    """
    Format failure msg and print to stderr.
    """

    error_console.print(f":x-emoji: failed. {escape(msg)}", style="fail")


def log(msg: str):
    """
    Print a timestamped msg to the log console (stderr). Used for progress that matters
    when bingsy runs unattended, e.g. from a startup script before the network is up.
    """

    log_console.log(msg)
