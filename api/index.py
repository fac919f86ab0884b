"""Vercel serverless entrypoint for the storefront API.

Vercel imports this module from the repository root without installing the
package, so ``src`` is put on the import path first.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from refuel_store.api.asgi import app  # noqa: E402

__all__ = ["app"]
