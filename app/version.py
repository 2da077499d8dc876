"""Version information from pyproject.toml."""

import sys
from pathlib import Path


def _load_version() -> str:
    """Load version from pyproject.toml."""
    # When running from PyInstaller bundle
    if getattr(sys, "frozen", False):
        base_path = Path(sys._MEIPASS)  # type: ignore[attr-defined]
    else:
        base_path = Path(__file__).parent.parent

    pyproject_path = base_path / "pyproject.toml"
    if not pyproject_path.exists():
        return "unknown"

    in_project = False
    for line in pyproject_path.read_text().splitlines():
        stripped = line.strip()
        if stripped.startswith("["):
            in_project = stripped == "[project]"
        elif in_project and stripped.startswith("version"):
            # Parse: version = "0.1.0"
            parts = stripped.split("=", 1)
            if len(parts) == 2:
                return parts[1].strip().strip('"').strip("'")
    return "unknown"


_VERSION = _load_version()


def get_version() -> str:
    """Get the application version."""
    return _VERSION
