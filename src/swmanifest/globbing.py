"""Glob matching over relative POSIX paths.

Patterns follow the conventions of build-tool globs rather than `fnmatch`:
  - `{a,b}` alternatives are expanded first (nesting allowed)
  - `**` as a whole segment matches zero or more directories
  - `*` and `?` never match `/`
  - a segment only matches a dotfile when the pattern segment itself starts
    with `.`
"""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple


def expand_braces(pattern: str) -> List[str]:
    """Expand the first top-level `{...}` group, recursively."""
    depth = 0
    start = -1
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "\\":
            i += 2
            continue
        if c == "{":
            if depth == 0:
                start = i
            depth += 1
        elif c == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                alts = _split_alternatives(pattern[start + 1 : i])
                if len(alts) > 1:
                    head, tail = pattern[:start], pattern[i + 1 :]
                    out: List[str] = []
                    for alt in alts:
                        for expanded in expand_braces(head + alt + tail):
                            if expanded not in out:
                                out.append(expanded)
                    return out
                # "{x}" is literal, as in most shells.
        i += 1
    return [pattern]


def _split_alternatives(body: str) -> List[str]:
    parts: List[str] = []
    depth = 0
    cur = ""
    for c in body:
        if c == "," and depth == 0:
            parts.append(cur)
            cur = ""
            continue
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
        cur += c
    parts.append(cur)
    return parts


def _segment_regex(seg: str) -> str:
    out = ""
    if not seg.startswith("."):
        out += r"(?!\.)"
    i = 0
    while i < len(seg):
        c = seg[i]
        if c == "*":
            out += "[^/]*"
        elif c == "?":
            out += "[^/]"
        elif c == "[":
            negated = seg[i + 1 : i + 2] in ("!", "^")
            j = seg.find("]", i + 2 if negated else i + 1)
            if j == -1:
                raise ValueError(f"unterminated character class in {seg!r}")
            cls = seg[i + 2 : j] if negated else seg[i + 1 : j]
            out += "[" + ("^" if negated else "") + cls.replace("\\", "\\\\") + "]"
            i = j
        elif c == "\\" and i + 1 < len(seg):
            i += 1
            out += re.escape(seg[i])
        else:
            out += re.escape(c)
        i += 1
    return out


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> "re.Pattern[str]":
    """Compile one brace-free glob to an anchored regex."""
    if pattern.startswith("./"):
        pattern = pattern[2:]
    if not pattern:
        raise ValueError("empty glob pattern")

    segs = pattern.split("/")
    rx = ""
    for n, seg in enumerate(segs):
        last = n == len(segs) - 1
        if seg == "**":
            rx += r"(?:(?!\.)[^/]*(?:/|$))*" if last else r"(?:(?!\.)[^/]*/)*"
            continue
        rx += _segment_regex(seg)
        if not last:
            rx += "/"
    try:
        return re.compile(rx + r"\Z")
    except re.error as e:
        raise ValueError(f"invalid glob pattern {pattern!r}: {e}") from e


@lru_cache(maxsize=256)
def _compiled(pattern: str) -> Tuple["re.Pattern[str]", ...]:
    return tuple(compile_glob(p) for p in expand_braces(pattern))


def matches(rel_path: str, patterns: Iterable[str]) -> bool:
    return any(rx.match(rel_path) for p in patterns for rx in _compiled(p))


def _raise(err: OSError) -> None:
    raise err


def _walk(directory: Path) -> List[str]:
    # An unreadable directory must fail the walk, not shrink the result.
    out: List[str] = []
    for dirpath, _dirnames, filenames in os.walk(directory, onerror=_raise):
        base = Path(dirpath)
        for name in filenames:
            p = base / name
            if p.is_file():
                out.append(p.relative_to(directory).as_posix())
    return sorted(out)


def glob_files(directory: Path, patterns: Sequence[str], ignores: Sequence[str] = ()) -> List[str]:
    """Relative POSIX paths of regular files under `directory` matching any pattern.

    The result is sorted and free of duplicates; anything matching an ignore
    pattern is dropped. Patterns are compiled before the walk so a malformed
    one fails without touching the tree. A directory that cannot be listed
    raises its OSError.
    """
    for p in list(patterns) + list(ignores):
        _compiled(p)

    return [
        rel
        for rel in _walk(Path(directory))
        if matches(rel, patterns) and not matches(rel, ignores)
    ]
