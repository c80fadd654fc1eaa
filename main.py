"""Entry point de desarrollo (sin instalar el paquete).

Uso:
- `python -m main init redis --name Acme`

Por qué:
- `cli`, `core` y `adapters` viven en `src/`; sin `pip install -e .` Python no
  los encuentra, así que se añade `src/` a `sys.path` antes de importar.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent / "src"


def main() -> None:
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))

    from cli.main import TOOL, app  # noqa: PLC0415

    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    app(prog_name=TOOL)


if __name__ == "__main__":
    main()
