from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping

DEFAULT_GLOB_PATTERNS = ["**/*.{js,css}"]
DEFAULT_GLOB_IGNORES = ["node_modules/**/*"]
DEFAULT_MAXIMUM_FILE_SIZE_TO_CACHE_IN_BYTES = 2 * 1024 * 1024
DEFAULT_MANIFEST_VARIABLE_NAME = "self.__file_manifest"

ATOMIC_WRITE_ENV = "SWMANIFEST_ATOMIC_WRITE"

DEFAULTS: Dict[str, Any] = {
    "glob_patterns": DEFAULT_GLOB_PATTERNS,
    "glob_ignores": DEFAULT_GLOB_IGNORES,
    "maximum_file_size_to_cache_in_bytes": DEFAULT_MAXIMUM_FILE_SIZE_TO_CACHE_IN_BYTES,
    "manifest_variable_name": DEFAULT_MANIFEST_VARIABLE_NAME,
}

# Keys that name filesystem locations; relative values in a config file
# resolve against the file's directory.
PATH_KEYS = ("sw_src", "sw_dest", "glob_directory")

# `manifestVariable` is the spelling some older configs use.
_ALIASES = {"manifest_variable": "manifest_variable_name"}

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def _truthy(v: str) -> bool:
    s = v.strip().lower()
    return s in ("1", "true", "yes", "y", "on")


def _falsey(v: str) -> bool:
    s = v.strip().lower()
    return s in ("0", "false", "no", "n", "off")


def snake_case(key: str) -> str:
    """`globDirectory` -> `glob_directory`; snake_case keys pass through."""
    k = _CAMEL.sub("_", key).lower()
    return _ALIASES.get(k, k)


def normalize_keys(config: Any) -> Any:
    """Return a copy of `config` with camelCase keys converted to snake_case.

    Non-dict input is returned untouched so the shape check can report it.
    """
    if not isinstance(config, Mapping):
        return config
    return {snake_case(str(k)) if isinstance(k, str) else k: v for k, v in config.items()}


def with_defaults(config: Mapping[str, Any]) -> Dict[str, Any]:
    out = {k: (list(v) if isinstance(v, list) else v) for k, v in DEFAULTS.items()}
    out.update({k: v for k, v in config.items() if v is not None})
    if isinstance(out.get("glob_ignores"), str):
        out["glob_ignores"] = [out["glob_ignores"]]
    return out


def load_config_file(path: Path) -> Dict[str, Any]:
    """Read a JSON config file.

    Keys may use either spelling. `dont_cache_bust_urls_matching` is kept as a
    pattern string; it is compiled where it is used.
    """
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    cfg = normalize_keys(raw)
    if not isinstance(cfg, dict):
        return cfg

    base = p.resolve().parent
    for k in PATH_KEYS:
        v = cfg.get(k)
        if isinstance(v, str) and v and not Path(v).is_absolute():
            cfg[k] = str(base / v)
    return cfg


def atomic_write_enabled(*, cli_no_atomic: bool = False) -> bool:
    """
    Default: ON.

    Controls:
      - CLI: --no-atomic disables
      - Env: SWMANIFEST_ATOMIC_WRITE overrides (true/false)

    Unknown env values => default ON.
    """
    if cli_no_atomic:
        return False

    v = os.environ.get(ATOMIC_WRITE_ENV)
    if v is None:
        return True

    if _truthy(v):
        return True
    if _falsey(v):
        return False

    return True
