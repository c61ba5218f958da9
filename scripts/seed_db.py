from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.campustrack.campustrack.common.app_logging import get_logger
from src.campustrack.campustrack.database.bootstrap import apply_seed_sql

_logger = get_logger("campustrack.scripts.seed_db")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    _logger.info("demo data loaded", extra={"database": db_config.get("database")})


if __name__ == "__main__":
    main()
