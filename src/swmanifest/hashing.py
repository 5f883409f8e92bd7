from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterable

CHUNK_SIZE = 1024 * 1024


def revision_for_file(path: Path) -> str:
    """MD5 hex digest of the file's bytes (change detection only)."""
    h = hashlib.md5()
    with Path(path).open("rb") as f:
        while True:
            b = f.read(CHUNK_SIZE)
            if not b:
                break
            h.update(b)
    return h.hexdigest()


def revision_for_bytes(b: bytes) -> str:
    return hashlib.md5(b).hexdigest()


def revision_for_string(s: str) -> str:
    return revision_for_bytes(s.encode("utf-8"))


def composite_revision(revisions: Iterable[str]) -> str:
    # Order-sensitive: callers pass revisions in glob order.
    h = hashlib.md5()
    for r in revisions:
        h.update(r.encode("utf-8"))
    return h.hexdigest()
