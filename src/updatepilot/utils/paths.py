"""Path utilities for UpdatePilot, compatible with PyInstaller."""

import sys
from pathlib import Path


def get_resources_dir() -> Path:
    """Get the resources directory path.

    This function returns the correct path for both:
    - Development environment: src/updatepilot/resources
    - PyInstaller packaged environment: <MEIPASS>/updatepilot/resources

    Returns:
        Path to the resources directory
    """
    if getattr(sys, "frozen", False):
        # PyInstaller packaged environment
        base_path = Path(sys._MEIPASS)  # type: ignore[attr-defined]
        return base_path / "updatepilot" / "resources"
    else:
        # This file is at src/updatepilot/utils/paths.py
        return Path(__file__).parent.parent / "resources"
