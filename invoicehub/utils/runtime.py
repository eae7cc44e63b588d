"""Runtime environment detection for dev vs PyInstaller bundled mode."""

import sys


def is_bundled() -> bool:
    """Return True when running from a PyInstaller bundle."""
    return getattr(sys, "frozen", False)
