# scripts/init_db.py
import asyncio

from vdfd.config import settings
from vdfd.db import build_engine, create_schema


async def main() -> None:
    engine = build_engine(settings.VDFD_DB_URL)
    try:
        await create_schema(engine)
    finally:
        await engine.dispose()
    print(f"OK: created all tables (idempotent). db={settings.VDFD_DB_URL}")


if __name__ == "__main__":
    asyncio.run(main())
