from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from .compose import serialize_manifest
from .config import atomic_write_enabled, load_config_file
from .entries import get_file_manifest_entries
from .errors import AcquisitionError, DirectoryCreationError, InvalidArgumentError, TransformError
from .hashing import revision_for_file
from .prepend import prepend_manifest
from .schema import validate_source_config

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_INVALID_ARGUMENT = 2
EXIT_DIRECTORY_CREATION_FAILED = 3
EXIT_ACQUISITION_FAILED = 4


def _config_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    cfg: Dict[str, Any] = {}
    if args.config:
        p = Path(args.config)
        if not p.exists():
            raise SystemExit(f"no such config file: {p}")
        loaded = load_config_file(p)
        if not isinstance(loaded, dict):
            raise InvalidArgumentError(f"{p}: config must be a JSON object")
        cfg.update(loaded)

    overrides = {
        "sw_src": getattr(args, "sw_src", None),
        "sw_dest": getattr(args, "sw_dest", None),
        "glob_directory": args.glob_directory,
        "glob_patterns": args.glob_pattern,
        "glob_ignores": args.glob_ignore,
        "manifest_variable_name": getattr(args, "variable_name", None),
    }
    cfg.update({k: v for k, v in overrides.items() if v is not None})
    return cfg


def cmd_inject(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    prepend_manifest(cfg, atomic=atomic_write_enabled(cli_no_atomic=args.no_atomic))
    print(cfg["sw_dest"])
    return EXIT_OK


def cmd_entries(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    validate_source_config(cfg)
    print(serialize_manifest(get_file_manifest_entries(cfg)))
    return EXIT_OK


def cmd_hash(args: argparse.Namespace) -> int:
    p = Path(args.path)
    if not p.is_file():
        raise SystemExit(f"no such file: {p}")
    print(revision_for_file(p))
    return EXIT_OK


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", help="JSON config file (snake_case or camelCase keys).")
    p.add_argument("--glob-directory", help="Directory the glob patterns run against.")
    p.add_argument(
        "--glob-pattern",
        action="append",
        help="Include pattern, e.g. '**/*.{js,css}'. May be repeated.",
    )
    p.add_argument("--glob-ignore", action="append", help="Exclude pattern. May be repeated.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="swmanifest",
        description="Build a precache manifest and prepend it to a service worker script.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr.")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_inj = sub.add_parser("inject", help="Prepend the manifest to sw_src and write sw_dest.")
    _add_source_args(p_inj)
    p_inj.add_argument("--sw-src", help="Service worker source to read.")
    p_inj.add_argument("--sw-dest", help="Where to write the result (parent dirs are created).")
    p_inj.add_argument("--variable-name", help="Global the manifest is assigned to.")
    p_inj.add_argument(
        "--no-atomic",
        action="store_true",
        help="Overwrite sw_dest in place instead of temp file + rename.",
    )
    p_inj.set_defaults(fn=cmd_inject)

    p_ent = sub.add_parser("entries", help="Print the manifest entries as JSON.")
    _add_source_args(p_ent)
    p_ent.set_defaults(fn=cmd_entries)

    p_hash = sub.add_parser("hash", help="Print the revision of a file.")
    p_hash.add_argument("path")
    p_hash.set_defaults(fn=cmd_hash)

    return p


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        return args.fn(args)
    except InvalidArgumentError as e:
        print(f"invalid argument: {e}", file=sys.stderr)
        return EXIT_INVALID_ARGUMENT
    except DirectoryCreationError as e:
        print(str(e), file=sys.stderr)
        return EXIT_DIRECTORY_CREATION_FAILED
    except (AcquisitionError, TransformError) as e:
        print(str(e), file=sys.stderr)
        return EXIT_ACQUISITION_FAILED
    except json.JSONDecodeError as e:
        print(f"bad config file: {e}", file=sys.stderr)
        return EXIT_INVALID_ARGUMENT
    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        return EXIT_IO_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
