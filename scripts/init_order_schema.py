"""Create the order_header table and its listing indexes."""

from __future__ import annotations

import os
from pathlib import Path

import psycopg
from dotenv import load_dotenv


def _env_url(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing {name} in environment")
    return value


def main() -> None:
    env_path = os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[1] / ".env"))
    load_dotenv(dotenv_path=env_path)
    dsn = _env_url("DATABASE_URL")
    schema_sql = Path(__file__).resolve().parents[1] / "sql" / "order_header.sql"
    with psycopg.connect(dsn) as conn:
        with conn.cursor() as cur:
            cur.execute(schema_sql.read_text(encoding="utf-8"))
    print(f"Applied {schema_sql.name}")


if __name__ == "__main__":
    main()
