"""Debug utility for Codeforge Apply.

Provides a single debug() function that can be toggled via the
CODEFORGE_DEBUG environment variable. Library code in the ``fs`` package
uses this instead of print() so batch internals stay quiet by default.
Output goes to stderr so command output on stdout stays machine-readable.

Usage:
    from codeforge_apply.utils.debug import debug

    debug("Starting batch")
    debug(f"Backed up {path}")

Environment:
    CODEFORGE_DEBUG: Set to '1', 'true', 'yes' (case-insensitive) to enable
                     debug output. Any other value or unset disables it.
"""

import os
import sys
from typing import Any

# Determine if debug mode is enabled at module import time
_DEBUG_ENABLED = os.environ.get("CODEFORGE_DEBUG", "").lower() in (
    "1",
    "true",
    "yes",
)


def debug(msg: Any) -> None:
    """Print debug message if CODEFORGE_DEBUG is enabled.

    Args:
        msg: Message to print. Will be converted to string.

    Note:
        The environment variable is read at module import time. Changing it
        afterwards has no effect unless the module is reloaded.
    """
    if _DEBUG_ENABLED:
        print(f"[DEBUG] {msg}", file=sys.stderr)
