"""I/O utilities for issue files, published documents, and JSON artifacts.

Text reading falls back UTF-8 -> CP1252 -> replace, since issue files are
hand-edited in many editors. JSON goes through orjson.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

import orjson

log = logging.getLogger(__name__)


def read_text(path: Path) -> str:
    """Read a text file with encoding fallback: UTF-8 -> CP1252 -> replace.

    Raises:
        OSError: the file cannot be opened.
    """
    log.debug("Reading file %s", path)
    raw = path.read_bytes()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        try:
            return raw.decode("cp1252")
        except UnicodeDecodeError:
            return raw.decode("utf-8", errors="replace")


def write_text(path: Path, text: str) -> None:
    """Write *text* as UTF-8, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    log.debug("Wrote %s (%d chars)", path, len(text))


def file_modified_date(path: Path) -> date:
    """Local-time date of the file's last modification."""
    return datetime.fromtimestamp(path.stat().st_mtime).date()


def load_json(path: Path) -> Any:
    """Load JSON from a file using orjson."""
    return orjson.loads(path.read_bytes())


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON using orjson, keys sorted."""
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS if pretty else orjson.OPT_SORT_KEYS
    path.write_bytes(orjson.dumps(obj, option=opts))
