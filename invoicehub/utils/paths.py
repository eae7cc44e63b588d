"""Production file path resolution using platformdirs.

In dev mode (not bundled), data and logs resolve relative to the project root.
In bundled mode (PyInstaller), paths use platform-appropriate directories:
  macOS: ~/Library/Application Support/com.invoicehub.app/
  Windows: %LOCALAPPDATA%/com.invoicehub.app/
  Linux: ~/.local/share/com.invoicehub.app/

Exported documents always go to the user's Documents folder, matching where
bookkeepers expect to find them.
"""

from pathlib import Path

import platformdirs

from invoicehub.utils.runtime import is_bundled

APP_NAME = "InvoiceHub"
# Bundle identifier for macOS (used by platformdirs when roaming=False)
_BUNDLE_ID = "com.invoicehub.app"


def get_data_dir() -> Path:
    """Return the directory for persistent data (DB, config).

    In dev mode: project root.
    In bundled mode: platform user data dir.
    """
    if is_bundled():
        return Path(platformdirs.user_data_dir(_BUNDLE_ID, appauthor=False))
    return Path(__file__).resolve().parent.parent.parent


def get_log_dir() -> Path:
    """Return the directory for application and debug logs."""
    if is_bundled():
        return Path(platformdirs.user_log_dir(_BUNDLE_ID, appauthor=False))
    return get_data_dir() / "logs"


def get_default_db_path() -> Path:
    """Return the default SQLite database file path."""
    return get_data_dir() / "invoicehub.db"


def get_default_output_dir() -> Path:
    """Return the folder exported documents are written to."""
    return Path(platformdirs.user_documents_dir()) / APP_NAME


def ensure_dirs_exist(*extra: Path) -> None:
    """Create all required directories if they don't exist."""
    for d in [get_data_dir(), get_log_dir(), *extra]:
        d.mkdir(parents=True, exist_ok=True)
