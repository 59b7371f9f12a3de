# -*- coding: utf-8 -*-
"""
Общие утилиты для загрузчиков / shared helpers for the loader scripts:
- whitespace normalisation;
- resolving the input path (cwd, JSON/ folder);
- reading a JSON file of school documents;
- loading .env before the web app config is imported.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def norm_spaces(s: Any) -> str:
    s = "" if s is None else str(s)
    s = s.replace("\u00A0", " ").replace("\u3000", " ")
    return re.sub(r"\s+", " ", s.strip())


def load_env_file(search_from: Optional[Path] = None) -> None:
    cwd_env = Path.cwd() / ".env"
    if cwd_env.exists():
        load_dotenv(dotenv_path=cwd_env)
        return

    if search_from is None:
        base = Path(__file__).resolve().parent
    else:
        p = Path(search_from).resolve()
        base = p if p.is_dir() else p.parent

    for folder in [base] + list(base.parents):
        env_path = folder / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)
            return

    load_dotenv()


def resolve_user_path(s: str) -> Path:
    p = Path(s)
    if p.exists():
        return p
    cand = Path.cwd() / s
    if cand.exists():
        return cand
    cand = Path.cwd() / "JSON" / s
    if cand.exists():
        return cand

    if not s.lower().endswith(".json"):
        for base in (Path.cwd(), Path.cwd() / "JSON"):
            cand2 = base / f"{s}.json"
            if cand2.exists():
                return cand2

    raise FileNotFoundError(f"File not found: {s}. Pass a full path or put the file in the current or JSON/ folder.")


def read_json_file(path: Path) -> Any:
    with open(path, mode="r", encoding="utf-8") as f:
        return json.load(f)


def as_school_list(data: Any) -> List[Any]:
    return data if isinstance(data, list) else [data]
