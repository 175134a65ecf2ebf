"""MindTree launcher.

Provides a stable entry point that runs preflight checks before importing
GTK-related modules, which gives clearer error messages on new systems.
"""

from __future__ import annotations

import logging
import os


def main() -> int:
    from mindtree.preflight import run_preflight_or_die

    logging.basicConfig(
        level=os.environ.get("MINDTREE_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    run_preflight_or_die(check_deps=True)

    from mindtree.app import main as app_main

    return int(app_main())


if __name__ == "__main__":
    raise SystemExit(main())
