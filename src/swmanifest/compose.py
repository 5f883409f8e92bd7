from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Union

from .entries import ManifestEntry

EntryLike = Union[ManifestEntry, Mapping[str, Any]]


def _as_dict(entry: EntryLike) -> Dict[str, Any]:
    # One rule for both forms: url first, revision omitted when None.
    if not isinstance(entry, ManifestEntry):
        entry = ManifestEntry.from_dict(entry)
    return entry.to_dict()


def serialize_manifest(entries: Sequence[EntryLike]) -> str:
    """Stable, diff-friendly JSON for a manifest.

    Entry order is taken as given, never sorted. Non-ASCII characters are
    escaped, so the text is the same in any ASCII-compatible encoding.
    """
    payload: List[Dict[str, Any]] = [_as_dict(e) for e in entries]
    return json.dumps(payload, indent=2)


def assignment_line(entries: Sequence[EntryLike], variable_name: str) -> str:
    return f"{variable_name} = {serialize_manifest(entries)};\n"


def compose_script(source: bytes, entries: Sequence[EntryLike], variable_name: str) -> bytes:
    # `source` follows the assignment verbatim, whatever its encoding.
    return assignment_line(entries, variable_name).encode("utf-8") + source


def read_script(path: Path) -> bytes:
    """Raw bytes of the source script; OSError propagates as-is."""
    return Path(path).read_bytes()
