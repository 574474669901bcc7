"""Punto de entrada: ``python -m sleeter``."""

from __future__ import annotations

from sleeter.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
