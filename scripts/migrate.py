from __future__ import annotations

import argparse
import sys
from pathlib import Path


def _bootstrap_import_path() -> None:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_bootstrap_import_path()

from user_registration.config import build_sqlalchemy_db_url, get_settings  # noqa: E402
from user_registration.database import create_db_engine, mask_db_url  # noqa: E402
from user_registration.db.migrations import pending_migrations, provision_schema  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Apply pending additive schema migrations to the configured database."
    )
    parser.add_argument(
        "--db-url",
        default=None,
        help="Target DB URL (defaults to the configured database from .env/env vars).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only list migrations that would be applied; changes nothing.",
    )
    args = parser.parse_args(argv)

    url = args.db_url or build_sqlalchemy_db_url(get_settings())
    print("migrating:", mask_db_url(url))

    engine = create_db_engine(url)
    try:
        if args.dry_run:
            pending = pending_migrations(engine)
            if not pending:
                print("nothing to apply")
            for migration in pending:
                print(f"pending {migration.version:03d} {migration.name}")
            return 0

        applied = provision_schema(engine, url)
    finally:
        engine.dispose()

    if applied:
        print("applied:", ", ".join(f"{v:03d}" for v in applied))
    else:
        print("schema already up to date")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
