"""
CLI: Excel / MongoDB -> Notion, ejecutable sin instalar el paquete.

Ejecución:
  python scripts/run_import.py excel
  python scripts/run_import.py mongo --database crm --collection contactos
"""

from __future__ import annotations

import sys
from pathlib import Path

from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

load_dotenv(_REPO_ROOT / ".env", override=False)

from notion_importer.cli.main import main


if __name__ == "__main__":
    raise SystemExit(main())
