from __future__ import annotations
import json
import logging
import os
from typing import Any, Iterable, Iterator, List

from . import config as CFG
from .models import ProductRecord

log = logging.getLogger(__name__)

PROGRESS_EVERY_RECORDS = 10_000


def _iter_catalog_files(roots: Iterable[str]) -> Iterator[str]:
    """Yield feed files: each root may be a file or a folder scanned recursively."""
    for root in roots:
        root = os.path.abspath(root)
        if os.path.isfile(root):
            yield root
            continue
        if not os.path.isdir(root):
            raise FileNotFoundError(root)
        for dirpath, _, filenames in os.walk(root):
            for fn in sorted(filenames):
                if fn.lower().endswith(CFG.CATALOG_EXTENSIONS):
                    yield os.path.join(dirpath, fn)


def _rows_from_json(payload: Any, path: str) -> List[Any]:
    # Accept a bare list, or an object wrapping it under "products"
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("products"), list):
        return payload["products"]
    if isinstance(payload, dict) and "id" in payload:
        return [payload]
    raise ValueError(f"{path}: expected a list of products or an object with 'products'")


def read_catalog_file(path: str) -> List[ProductRecord]:
    with open(path, "r", encoding="utf-8") as f:
        if path.lower().endswith(".jsonl"):
            rows = []
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    rows.append(json.loads(line))
                except json.JSONDecodeError as e:
                    raise ValueError(f"{path}:{line_no}: invalid JSON ({e.msg})") from e
        else:
            try:
                rows = _rows_from_json(json.load(f), path)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}: invalid JSON ({e.msg})") from e
    return [ProductRecord.from_dict(r) for r in rows]


def load_catalog(roots: Iterable[str]) -> List[ProductRecord]:
    """
    Read every catalog feed under `roots` (.json lists or .jsonl lines).
    Later files win when two records share an id (the index overwrites).
    """
    records: List[ProductRecord] = []
    file_count = 0
    for path in _iter_catalog_files(roots):
        batch = read_catalog_file(path)
        records.extend(batch)
        file_count += 1
        log.debug("read %d products from %s", len(batch), path)
        if CFG.VERBOSE and len(records) // PROGRESS_EVERY_RECORDS != (len(records) - len(batch)) // PROGRESS_EVERY_RECORDS:
            log.info("[loaded] products=%s", f"{len(records):,}")
    log.info("catalog loaded: files=%d products=%d", file_count, len(records))
    return records
