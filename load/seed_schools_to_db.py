# -*- coding: utf-8 -*-
"""
Загрузка школ из JSON в базу / seed the school collection from a JSON file.

Expected input
- a JSON array of school documents, or a single school object

What it does
- validates every document
- deletes every school (with campuses and departments), then inserts the file contents
- fills each plan's prior_year_outcome from the following year's last_year_pass_data
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

try:
    from .load_common import as_school_list, load_env_file, read_json_file, resolve_user_path, setup_logging
except ImportError:
    from load_common import as_school_list, load_env_file, read_json_file, resolve_user_path, setup_logging


logger = logging.getLogger("seed")


def seed_from_file(path: Path, *, dry_run: bool = False, session_factory=None) -> int:
    # config reads DATABASE_URL at import time, so .env must be loaded first
    load_env_file(search_from=path)
    from uniadmit_webapp.schemas import SchoolDocument
    from uniadmit_webapp.seed_repo import replace_all_schools

    schools: List[Any] = as_school_list(read_json_file(path))
    logger.info("Found %s schools to import from %s", len(schools), path)

    if dry_run:
        for doc in schools:
            SchoolDocument.model_validate(doc)
        logger.info("Dry run: documents are valid, database not touched")
        return len(schools)

    if session_factory is None:
        from uniadmit_webapp.db import SessionLocal, init_db

        init_db()
        session_factory = SessionLocal

    db = session_factory()
    try:
        count = replace_all_schools(db, schools)
    finally:
        db.close()

    logger.info("Successfully inserted %s schools", count)
    return count


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Seed the school collection from JSON (delete-all + insert-all)")
    ap.add_argument("file", nargs="?", help="Path to the JSON file (default: SEED_FILE from .env, JSON/TEST1.json).")
    ap.add_argument("--dry-run", action="store_true", help="Validate the file without writing to the database.")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args(argv)

    setup_logging(args.log_level)
    try:
        if args.file:
            path = resolve_user_path(args.file)
        else:
            load_env_file()
            from uniadmit_webapp.config import SEED_FILE

            path = SEED_FILE
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        seed_from_file(path, dry_run=args.dry_run)
    except Exception:
        logger.exception("Seed error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
