from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Union

from .errors import DirectoryCreationError


def ensure_parent_directory(path: Path) -> Path:
    parent = Path(path).parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreationError(f"'{e}'") from e
    return parent


def write_script(path: Path, data: Union[bytes, str], atomic: bool = True) -> Path:
    """Replace the whole content of `path` with `data`, byte for byte.

    `str` is encoded as UTF-8. A symlinked `path` is written through: the
    link stays and its target gets the new content.

    atomic=True writes a temp file next to the real target and renames it
    over the target, so readers see either the old file or the new one. The
    temp file is removed if anything fails before the rename.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    dst = Path(os.path.realpath(path))

    if not atomic:
        dst.write_bytes(data)
        return dst

    fd, tmp_name = tempfile.mkstemp(prefix=f".{dst.name}.", suffix=".tmp", dir=dst.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        if dst.exists():
            # mkstemp creates 0600; keep the destination's existing mode.
            os.chmod(tmp, dst.stat().st_mode & 0o7777)
        else:
            os.chmod(tmp, 0o644)
        tmp.replace(dst)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return dst
