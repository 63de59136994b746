from __future__ import annotations

import getpass
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.meeting_attendance.meeting_attendance.database.bootstrap import store_access_key


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    access_key = sys.argv[1] if len(sys.argv) > 1 else getpass.getpass("New access key: ")
    if not access_key.strip():
        sys.exit("Access key must not be empty")

    store_access_key(db_config, access_key.strip())
    print(f"OK: access key updated for {db_config.get('database')}")


if __name__ == "__main__":
    main()
