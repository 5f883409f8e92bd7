from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Mapping

from .compose import compose_script, read_script
from .config import atomic_write_enabled, normalize_keys, with_defaults
from .entries import ManifestSource, get_file_manifest_entries, normalize_entries
from .schema import validate_config
from .writer import ensure_parent_directory, write_script

log = logging.getLogger(__name__)


def prepend_manifest(
    config: Mapping[str, Any],
    *,
    source: ManifestSource = get_file_manifest_entries,
    atomic: bool | None = None,
) -> None:
    """Read `sw_src`, prepend the precache manifest, write `sw_dest`.

    The output is

        <manifest_variable_name> = [ ...entries... ];\\n<sw_src bytes>

    `sw_src` is copied as raw bytes, so its encoding and line endings are
    kept.

    Stages run strictly in order: validate, acquire, read, compose, make
    directory, write. The first failure propagates and later stages never
    run, so `sw_dest` is only touched once everything before the write has
    succeeded. `sw_src` is read in full before writing, which makes
    `sw_src == sw_dest` safe.

    Failures:
      - InvalidArgumentError: config shape check failed (no I/O done)
      - AcquisitionError / TransformError or whatever `source` raises;
        AcquisitionError(invalid-manifest-entries) if `source` returns
        something other than {url, revision} entries
      - OSError: `sw_src` unreadable, or the write failed
      - DirectoryCreationError: parent directory of `sw_dest` can't be made

    Example:

        prepend_manifest({
            "glob_directory": "./build/",
            "glob_patterns": ["**/*.{html,js,css}"],
            "glob_ignores": ["admin.html"],
            "sw_src": "./src/sw.js",
            "sw_dest": "./build/sw.js",
        })
    """
    config = normalize_keys(config)
    validate_config(config)
    cfg = with_defaults(config)

    entries = normalize_entries(source(cfg))

    sw_src = Path(cfg["sw_src"])
    sw_dest = Path(cfg["sw_dest"])
    data = compose_script(read_script(sw_src), entries, cfg["manifest_variable_name"])

    ensure_parent_directory(sw_dest)
    if atomic is None:
        atomic = atomic_write_enabled()
    write_script(sw_dest, data, atomic=atomic)
    log.info("wrote %s (%d manifest entries)", sw_dest, len(entries))


async def prepend_manifest_async(config: Mapping[str, Any], **kwargs: Any) -> None:
    """Awaitable `prepend_manifest`; the pipeline runs in a worker thread.

    Independent invocations (distinct sw_src/sw_dest pairs) may be gathered
    concurrently.
    """
    await asyncio.to_thread(prepend_manifest, config, **kwargs)
