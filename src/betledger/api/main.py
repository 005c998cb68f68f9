"""CLI entrypoint to run the betledger FastAPI server."""

from __future__ import annotations

import argparse
import logging
import os

import uvicorn

from betledger.config import get_settings
from betledger.db.database import init_db


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the betledger import and settlement API.")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--reload", action="store_true", help="restart on code changes (development only)")
    parser.add_argument("--skip-init-db", action="store_true", help="do not create missing tables before serving")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if not args.skip_init_db:
        init_db()
    uvicorn.run(
        "betledger.api.server:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":  # pragma: no cover
    main()
