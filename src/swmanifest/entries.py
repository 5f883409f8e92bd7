"""Manifest acquisition: enumerate, hash and transform build output.

`get_file_manifest_entries` is the default `ManifestSource`. The pipeline in
`prepend.py` only relies on the contract

    config -> ordered sequence of ManifestEntry (or {"url", "revision"} dicts)

so any callable with that shape can stand in for it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Sequence, Union

from .config import with_defaults
from .errors import AcquisitionError, TransformError
from .globbing import glob_files
from .hashing import composite_revision, revision_for_file, revision_for_string
from .schema import validate_entries

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestEntry:
    url: str
    revision: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        # Key order is part of the output format: url, then revision.
        d: Dict[str, Any] = {"url": self.url}
        if self.revision is not None:
            d["revision"] = self.revision
        return d

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "ManifestEntry":
        return ManifestEntry(url=d["url"], revision=d.get("revision"))


@dataclass(frozen=True)
class FileDetails:
    file: str
    hash: str
    size: int


ManifestSource = Callable[[Mapping[str, Any]], Sequence[Union[ManifestEntry, Mapping[str, Any]]]]
ManifestTransform = Callable[[List[Dict[str, Any]]], Any]


def get_file_details(glob_directory: Path, pattern: str, ignores: Sequence[str]) -> List[FileDetails]:
    try:
        files = glob_files(glob_directory, [pattern], ignores)
    except (OSError, ValueError) as e:
        raise AcquisitionError(f"'{e}'") from e

    if not files:
        log.warning("glob pattern %r matched no files in %s", pattern, glob_directory)

    out: List[FileDetails] = []
    for rel in files:
        p = glob_directory / rel
        out.append(FileDetails(file=rel, hash=revision_for_file(p), size=p.stat().st_size))
    return out


def _templated_entries(
    glob_directory: Path,
    templated_urls: Mapping[str, Any],
    ignores: Sequence[str],
) -> List[FileDetails]:
    out: List[FileDetails] = []
    for url, deps in templated_urls.items():
        if isinstance(deps, str):
            out.append(FileDetails(file=url, hash=revision_for_string(deps), size=len(deps.encode("utf-8"))))
        elif isinstance(deps, list) and deps:
            details: List[FileDetails] = []
            for pattern in deps:
                matched = get_file_details(glob_directory, pattern, ignores)
                if not matched:
                    raise AcquisitionError(f"'{url}' -> '{pattern}'", code="bad-template-urls-asset")
                details.extend(matched)
            out.append(FileDetails(
                file=url,
                hash=composite_revision(d.hash for d in details),
                size=sum(d.size for d in details),
            ))
        else:
            raise AcquisitionError(f"'{url}'", code="invalid-templated-urls")
    return out


def modify_url_prefix_transform(modify_url_prefix: Mapping[str, str]) -> ManifestTransform:
    for k, v in modify_url_prefix.items():
        if not isinstance(k, str) or not isinstance(v, str):
            raise AcquisitionError(f"'{k!r}: {v!r}'", code="modify-url-prefix-bad-prefixes")

    prefixes = list(modify_url_prefix.items())

    def transform(manifest: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        out = []
        for entry in manifest:
            url = entry["url"]
            for old, new in prefixes:
                if url.startswith(old):
                    url = new + url[len(old):]
                    break
            out.append({**entry, "url": url})
        return out

    return transform


def no_revision_for_urls_matching_transform(pattern: Any) -> ManifestTransform:
    if isinstance(pattern, str):
        try:
            rx = re.compile(pattern)
        except re.error as e:
            raise AcquisitionError(f"'{e}'", code="invalid-dont-cache-bust") from e
    elif isinstance(pattern, re.Pattern):
        rx = pattern
    else:
        raise AcquisitionError(f"'{pattern!r}'", code="invalid-dont-cache-bust")

    def transform(manifest: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        out = []
        for entry in manifest:
            if rx.search(entry["url"]):
                out.append({"url": entry["url"]})
            else:
                out.append(entry)
        return out

    return transform


def apply_transforms(manifest: List[Dict[str, Any]], transforms: Sequence[ManifestTransform]) -> List[Dict[str, Any]]:
    """Run transforms in order.

    A transform returns either the new entry list or a dict
    `{"manifest": [...], "warnings": [...]}`. Exceptions raised by a transform
    propagate unchanged.
    """
    for transform in transforms:
        result = transform([dict(e) for e in manifest])
        if isinstance(result, dict):
            for w in result.get("warnings") or []:
                log.warning("%s", w)
            if "manifest" not in result:
                raise TransformError("missing 'manifest'")
            result = result["manifest"]
        if isinstance(result, tuple):
            result = list(result)
        validate_entries(result)
        manifest = [dict(e) for e in result]
    return manifest


def get_file_manifest_entries(config: Mapping[str, Any]) -> List[ManifestEntry]:
    cfg = with_defaults(config)

    glob_directory = Path(cfg["glob_directory"])
    if not glob_directory.is_dir():
        raise AcquisitionError(f"'{glob_directory}'", code="invalid-glob-directory")

    ignores = list(cfg["glob_ignores"])
    max_size = cfg["maximum_file_size_to_cache_in_bytes"]

    details: List[FileDetails] = []
    for pattern in cfg["glob_patterns"]:
        details.extend(get_file_details(glob_directory, pattern, ignores))

    if cfg.get("templated_urls") is not None:
        if not isinstance(cfg["templated_urls"], Mapping):
            raise AcquisitionError(code="invalid-templated-urls")
        details.extend(_templated_entries(glob_directory, cfg["templated_urls"], ignores))

    seen = set()
    manifest: List[Dict[str, Any]] = []
    for d in details:
        if d.file in seen:
            continue
        seen.add(d.file)
        if d.size > max_size:
            log.warning(
                "%s is %d bytes, over the %d byte limit; it will not be precached",
                d.file, d.size, max_size,
            )
            continue
        manifest.append({"url": d.file, "revision": d.hash})

    transforms: List[ManifestTransform] = []
    if cfg.get("modify_url_prefix"):
        transforms.append(modify_url_prefix_transform(cfg["modify_url_prefix"]))
    if cfg.get("dont_cache_bust_urls_matching") is not None:
        transforms.append(no_revision_for_urls_matching_transform(cfg["dont_cache_bust_urls_matching"]))
    transforms.extend(cfg.get("manifest_transforms") or [])

    manifest = apply_transforms(manifest, transforms)
    log.info("manifest: %d entries from %s", len(manifest), glob_directory)
    return [ManifestEntry.from_dict(e) for e in manifest]


def normalize_entries(entries: Any) -> List[ManifestEntry]:
    """Check what a `ManifestSource` returned and convert it to ManifestEntry.

    Dicts must carry `url` and optionally `revision`; anything else is an
    AcquisitionError rather than being dropped.
    """
    if isinstance(entries, tuple):
        entries = list(entries)
    if isinstance(entries, list):
        as_dicts = [e.to_dict() if isinstance(e, ManifestEntry) else e for e in entries]
    else:
        as_dicts = entries
    validate_entries(as_dicts, error=AcquisitionError, code="invalid-manifest-entries")
    return [ManifestEntry.from_dict(e) for e in as_dicts]
