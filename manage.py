"""
Operator commands for the courses database.

Usage:
    python manage.py init-db              # create the courses table if absent
    python manage.py reset-sequence       # compact ids to 1..N and restart the counter
    python manage.py recreate-table --yes # DROP and recreate the table (destroys all rows)
    python manage.py serve [--host H] [--port P]

The destructive recreate is deliberately kept off the HTTP surface.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from core.config import get_settings
from core.errors import CourseError
from core.logging_config import configure_logging
from database import create_schema, dispose_engine, drop_schema, get_sessionmaker, init_engine
from repository import CourseRepository

logger = logging.getLogger("manage")


def init_db() -> int:
    create_schema(init_engine())
    return 0


def recreate_table(confirmed: bool) -> int:
    if not confirmed:
        print("Refusing to drop the courses table without --yes", file=sys.stderr)
        return 2
    engine = init_engine()
    drop_schema(engine)
    create_schema(engine)
    logger.warning("courses_table_recreated")
    return 0


def reset_sequence() -> int:
    init_engine()
    with get_sessionmaker()() as db:
        try:
            result = CourseRepository(db).reset_sequence()
        except CourseError as e:
            print(f"reset-sequence failed: {e.message}", file=sys.stderr)
            return 1
    print(json.dumps(result.model_dump(by_alias=True)))
    return 0


def serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("main:app", host=host, port=port, log_config=None)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="manage.py", description="Courses API operator commands")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the courses table if it does not exist")
    sub.add_parser("reset-sequence", help="Renumber course ids to 1..N by creation time")

    recreate = sub.add_parser("recreate-table", help="Drop and recreate the courses table")
    recreate.add_argument("--yes", action="store_true", help="Confirm that every course row will be deleted")

    serve_p = sub.add_parser("serve", help="Run the API with uvicorn")
    serve_p.add_argument("--host", default="0.0.0.0")
    serve_p.add_argument("--port", type=int, default=3000)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().log_level)
    try:
        if args.command == "init-db":
            return init_db()
        if args.command == "reset-sequence":
            return reset_sequence()
        if args.command == "recreate-table":
            return recreate_table(args.yes)
        return serve(args.host, args.port)
    finally:
        dispose_engine()


if __name__ == "__main__":
    sys.exit(main())
