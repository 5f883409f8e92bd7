from __future__ import annotations

import json
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Type

from jsonschema import Draft202012Validator, validators
from referencing import Registry, Resource

from .errors import InvalidArgumentError, ManifestError, TransformError

SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

CONFIG_SCHEMA_ID = "swm:prepend-manifest-config-v1"
SOURCE_SCHEMA_ID = "swm:manifest-source-config-v1"
ENTRY_SCHEMA_ID = "swm:manifest-entry-v1"

MAX_REPORTED_ERRORS = 5


def _is_callable(checker: Any, instance: Any) -> bool:
    return callable(instance)


def _is_regex(checker: Any, instance: Any) -> bool:
    if isinstance(instance, re.Pattern):
        return True
    if not isinstance(instance, str):
        return False
    try:
        re.compile(instance)
    except re.error:
        return False
    return True


def _is_path(checker: Any, instance: Any) -> bool:
    return isinstance(instance, (str, os.PathLike)) and os.fspath(instance) != ""


# Draft 2020-12 plus the Python-only values a config may carry.
ConfigValidator = validators.extend(
    Draft202012Validator,
    type_checker=Draft202012Validator.TYPE_CHECKER.redefine_many(
        {"callable": _is_callable, "regex": _is_regex, "path": _is_path}
    ),
)


def _load(name: str) -> Dict[str, Any]:
    return json.loads((SCHEMA_DIR / name).read_text(encoding="utf-8"))


@lru_cache(maxsize=1)
def _registry() -> Registry:
    return Registry().with_resources([
        (CONFIG_SCHEMA_ID, Resource.from_contents(_load("prepend-manifest-config-v1.schema.json"))),
        (SOURCE_SCHEMA_ID, Resource.from_contents(_load("manifest-source-config-v1.schema.json"))),
        (ENTRY_SCHEMA_ID, Resource.from_contents(_load("manifest-entry-v1.schema.json"))),
    ])


def _json_pointer(path_parts: Any) -> str:
    parts = list(path_parts)

    def esc(p: Any) -> str:
        return str(p).replace("~", "~0").replace("/", "~1")

    return "" if not parts else "/" + "/".join(esc(p) for p in parts)


def _messages(v: Draft202012Validator, instance: Any) -> List[str]:
    errs = sorted(v.iter_errors(instance), key=lambda e: (_json_pointer(e.path), e.message))
    out: List[str] = []
    for e in errs:
        # `required` is checked both here and through the $ref'd schema.
        msg = f"{_json_pointer(e.path) or '/'}: {e.message}"
        if msg not in out:
            out.append(msg)
    return out[:MAX_REPORTED_ERRORS]


def _validator(schema_id: str) -> Draft202012Validator:
    reg = _registry()
    return ConfigValidator(reg[schema_id].contents, registry=reg)


def validate_config(config: Any) -> None:
    """Shape-check a `prepend_manifest()` config; pure, no filesystem access.

    Schemas are loaded once from package data; the first call reads them.
    """
    msgs = _messages(_validator(CONFIG_SCHEMA_ID), config)
    if msgs:
        raise InvalidArgumentError("; ".join(msgs))


def validate_source_config(config: Any) -> None:
    """Like `validate_config`, but `sw_src`/`sw_dest` are optional."""
    msgs = _messages(_validator(SOURCE_SCHEMA_ID), config)
    if msgs:
        raise InvalidArgumentError("; ".join(msgs))


def validate_entries(entries: Any, *, error: Type[ManifestError] = TransformError, code: str | None = None) -> None:
    """Check a list of manifest entries against the entry schema.

    Used on transform output (TransformError by default) and on whatever an
    injected manifest source returns.
    """
    v = Draft202012Validator({"$ref": f"{ENTRY_SCHEMA_ID}#/$defs/manifest"}, registry=_registry())
    msgs = _messages(v, entries)
    if msgs:
        raise error("; ".join(msgs), code=code)
