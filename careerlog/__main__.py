"""
Module entrypoint:

  python -m careerlog export-csv path/to/persistent.sfs out.csv
"""
from __future__ import annotations

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
