"""
Apply api/core/schema.sql to the database named by DATABASE_URL.

Usage:
    DATABASE_URL=postgresql://... python scripts/setup_db.py
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import asyncpg

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "api"))

from core.db import database_url  # noqa: E402

SCHEMA_PATH = ROOT / "api" / "core" / "schema.sql"


async def setup_database() -> None:
    dsn = database_url()
    print(f"Applying {SCHEMA_PATH.name} ...")
    conn = await asyncpg.connect(dsn)
    try:
        await conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
        now = await conn.fetchval("SELECT now()")
    finally:
        await conn.close()
    print(f"Database schema created successfully (server time {now}).")


def main() -> int:
    try:
        asyncio.run(setup_database())
    except (OSError, asyncpg.PostgresError, RuntimeError) as exc:
        print(f"Error setting up database: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
