# scripts/push_unsynced.py
from __future__ import annotations

import argparse
import asyncio
import logging

from vdfd.adapters.local_store import SqlAlchemyLocalStore
from vdfd.config import settings
from vdfd.db import build_engine, build_session_maker, create_schema
from vdfd.entrypoints.fastapi_app import build_remote
from vdfd.logging_config import configure_logging
from vdfd.service_layer.sync import SyncReconciler


async def main() -> None:
    parser = argparse.ArgumentParser(description="Push a user's unsynced leads and routes to the remote store.")
    parser.add_argument("--user", required=True, help="Owner user id")
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)

    engine = build_engine(settings.VDFD_DB_URL)
    try:
        await create_schema(engine)
        reconciler = SyncReconciler(
            SqlAlchemyLocalStore(build_session_maker(engine)),
            build_remote(settings),
            average_speed=settings.DEFAULT_AVERAGE_SPEED_MPH,
        )
        summary = await reconciler.push_unsynced(args.user)
    finally:
        await engine.dispose()

    logging.getLogger(__name__).info("done")
    print(
        f"attempted={summary.attempted} synced={summary.synced} "
        f"failed={summary.failed} skipped={summary.skipped}"
    )


if __name__ == "__main__":
    asyncio.run(main())
