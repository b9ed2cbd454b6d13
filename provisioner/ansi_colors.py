"""
ANSI color codes for log and terminal output.

Usage:
    from provisioner.ansi_colors import GREEN, RESET
    print(f"{GREEN}Done!{RESET} All virtual devices were created.")
"""

import os
import sys

# Regular colors
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
WHITE = "\033[37m"
GRAY = "\033[90m"

# Bright colors
BRIGHT_YELLOW = "\033[93m"

RESET = "\033[0m"  # Reset all styles and colors


def supports_color(stream=None):
    """Determine if a stream supports ANSI color codes.

    Returns:
        bool: True if colors should be written, False otherwise
    """
    stream = stream or sys.stdout

    if not hasattr(stream, "isatty") or not stream.isatty():
        return False

    if "NO_COLOR" in os.environ or "NO_COLOR_CONSOLE" in os.environ:
        return False

    if "TERM" in os.environ:
        return os.environ["TERM"] != "dumb"

    return os.name == "posix"
