# scripts/export_leads.py
from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from vdfd.adapters.local_store import SqlAlchemyLocalStore
from vdfd.config import settings
from vdfd.db import build_engine, build_session_maker, create_schema
from vdfd.domain.clock import utcnow
from vdfd.logging_config import configure_logging
from vdfd.services.export import ExportOptions, export_leads


async def main() -> None:
    parser = argparse.ArgumentParser(description="Export a user's leads from the local store.")
    parser.add_argument("--user", required=True, help="Owner user id")
    parser.add_argument("--format", choices=["csv", "json", "pdf"], default="csv")
    parser.add_argument("--no-notes", action="store_true", help="Leave notes out of the export")
    parser.add_argument("--out", default=None, help="Output path (defaults to the generated filename)")
    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)

    engine = build_engine(settings.VDFD_DB_URL)
    try:
        await create_schema(engine)
        store = SqlAlchemyLocalStore(build_session_maker(engine))
        leads = await store.list_leads(args.user)
    finally:
        await engine.dispose()

    artifact = export_leads(
        leads,
        ExportOptions(
            format=args.format,
            include_notes=not args.no_notes,
            pdf_max_leads=settings.PDF_MAX_LEADS,
        ),
        now=utcnow(),
    )
    out = Path(args.out or artifact.filename)
    out.write_bytes(artifact.content)
    print(f"Wrote {len(leads)} leads to {out}")


if __name__ == "__main__":
    asyncio.run(main())
