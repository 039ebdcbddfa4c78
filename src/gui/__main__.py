"""Module entrypoint for `python -m gui`.

Delegates to `gui.app.main` to launch the heatmap window.
"""

from __future__ import annotations

from .app import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
