"""Dependency preflight checks for the MindTree GUI.

The editor engine is plain Python; only the GUI needs GTK 4, libadwaita and
cairo. Checking them before importing the GUI modules gives a readable
message instead of an import traceback.
Set MINDTREE_SKIP_PREFLIGHT=1 to bypass (useful for development).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Optional

from mindtree.config import ENV_SKIP_PREFLIGHT


@dataclass(frozen=True)
class PreflightResult:
    ok: bool
    message: str


def _check_python_deps() -> Optional[str]:
    """Return an error message if GUI deps are missing."""
    try:
        import cairo  # type: ignore[import-not-found]  # noqa: F401
    except ImportError as exc:
        return (
            "Missing Python dependency 'pycairo'. "
            "Install it with pip (pycairo) and ensure cairo is available. "
            f"Underlying error: {exc}"
        )

    try:
        import gi  # type: ignore[import-not-found]

        gi.require_version("Gtk", "4.0")
        gi.require_version("Adw", "1")
        gi.require_version("Gdk", "4.0")
        from gi.repository import Gtk, Adw, Gdk  # type: ignore[import-not-found]  # noqa: F401
    except (ImportError, ValueError) as exc:
        return (
            "Missing GTK/libadwaita bindings. Install GTK 4, libadwaita and "
            "PyGObject (pip install 'mindtree[gui]'). "
            f"Underlying error: {exc}"
        )

    return None


def run_preflight(*, check_deps: bool = True) -> PreflightResult:
    """Run checks and return a structured result."""
    if os.environ.get(ENV_SKIP_PREFLIGHT) == "1":
        return PreflightResult(True, f"Preflight skipped via {ENV_SKIP_PREFLIGHT}=1")

    if check_deps:
        dep_error = _check_python_deps()
        if dep_error:
            return PreflightResult(False, dep_error)

    return PreflightResult(True, "Preflight OK")


def run_preflight_or_die(*, check_deps: bool = True) -> None:
    result = run_preflight(check_deps=check_deps)
    if result.ok:
        return

    sys.stderr.write("\nMindTree preflight check failed:\n")
    sys.stderr.write(result.message)
    sys.stderr.write("\n\n")
    raise SystemExit(1)
