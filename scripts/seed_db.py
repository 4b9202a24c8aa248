from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.desk_booking.desk_booking.database.bootstrap import DEMO_USERS, ensure_demo_data


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_data(db_config)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )
    for full_name, username, password, role in DEMO_USERS:
        print(f"  {role.value:<12} {username} / {password} ({full_name})")


if __name__ == "__main__":
    main()
