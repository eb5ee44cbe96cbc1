#!/usr/bin/env python3
"""Run ``iicgen write`` from a source checkout.

Delegates to :mod:`iicgen.commands.write`; the ``src`` directory is added to
``sys.path`` so the script works before ``pip install .``.
"""

from __future__ import annotations

import sys
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_SRC_PATH = _PROJECT_ROOT / "src"
if str(_SRC_PATH) not in sys.path:
    sys.path.insert(0, str(_SRC_PATH))

from iicgen.commands.write import main

if __name__ == "__main__":  # pragma: no cover - direct execution
    raise SystemExit(main())
