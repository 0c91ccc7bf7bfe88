"""
Utility functions for OpenGrammar.

Includes logging, clipboard access, and helper functions.
"""

import shutil
import subprocess
import sys
from datetime import datetime
from typing import List, Optional

# Console colors
C_RESET = "\033[0m"
C_BOLD = "\033[1m"
C_DIM = "\033[2m"
C_RED = "\033[91m"
C_GREEN = "\033[92m"
C_YELLOW = "\033[93m"
C_CYAN = "\033[96m"
C_MAGENTA = "\033[95m"

# Log level styles
LOG_STYLES = {
    "INFO": (C_DIM, "›"),
    "OK": (C_GREEN, "✓"),
    "WARN": (C_YELLOW, "⚠"),
    "ERR": (C_RED, "✗"),
    "AI": (C_MAGENTA, "✦"),
    "APP": (C_CYAN, "◆"),
}

# Timeout values (seconds)
CLIPBOARD_TIMEOUT = 5
SERVICE_CHECK_TIMEOUT = 2

# Display truncation
LOG_TRUNCATE = 60

# Clipboard writers, tried in order
CLIPBOARD_COMMANDS = [
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
]


def log(msg: str, level: str = "INFO"):
    """Print a timestamped, colored log message to stderr."""
    ts = datetime.now().strftime("%H:%M:%S")
    color, sym = LOG_STYLES.get(level, (C_DIM, "›"))
    print(f"  {C_DIM}{ts}{C_RESET}  {color}{sym}{C_RESET}  {msg}", file=sys.stderr)


def truncate(text: str, length: int = LOG_TRUNCATE) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) > length:
        return text[:length] + "..."
    return text


def _clipboard_command() -> Optional[List[str]]:
    """First clipboard writer available on PATH."""
    for command in CLIPBOARD_COMMANDS:
        if shutil.which(command[0]):
            return command
    return None


def copy_to_clipboard(text: str) -> bool:
    """Copy text to clipboard. Returns True on success."""
    command = _clipboard_command()
    if command is None:
        log("Copy failed: no clipboard tool found (pbcopy, wl-copy, xclip, xsel)", "ERR")
        return False
    try:
        subprocess.run(command, input=text.encode(), check=True, timeout=CLIPBOARD_TIMEOUT)
        return True
    except Exception as e:
        log(f"Copy failed: {e}", "ERR")
        return False
