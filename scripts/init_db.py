from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.meeting_attendance.meeting_attendance.database.bootstrap import apply_schema, apply_seed_sql, list_tables
from src.meeting_attendance.meeting_attendance.database.connection import DBConfig


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply database/schema.sql (and optionally seed.sql).")
    parser.add_argument("--seed", action="store_true", help="also insert the default meetings")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    target = DBConfig.from_mapping(db_config).describe()

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    if args.seed:
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    tables = list_tables(db_config)
    print(f"OK: Applied schema.sql{' + seed.sql' if args.seed else ''} -> {target} (tables={len(tables)})")


if __name__ == "__main__":
    main()
