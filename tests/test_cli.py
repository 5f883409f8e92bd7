from __future__ import annotations

import json
from pathlib import Path

import pytest

from swmanifest.cli import (
    EXIT_ACQUISITION_FAILED,
    EXIT_DIRECTORY_CREATION_FAILED,
    EXIT_INVALID_ARGUMENT,
    EXIT_IO_ERROR,
    EXIT_OK,
    main,
)

EMPTY_MD5 = "d41d8cd98f00b204e9800998ecf8427e"


def _init_site(root: Path) -> Path:
    assets = root / "build"
    assets.mkdir()
    (assets / "index.html").write_bytes(b"")
    (assets / "index.css").write_bytes(b"")
    (root / "sw.js").write_text("// sw body", encoding="utf-8")
    conf = root / "swmanifest.json"
    conf.write_text(
        json.dumps({
            "globDirectory": "build",
            "globPatterns": ["**/*.{html,css}"],
            "swSrc": "sw.js",
            "swDest": "dist/sw.js",
        }),
        encoding="utf-8",
    )
    return conf


def test_inject_from_config_file(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    conf = _init_site(tmp_path)
    assert main(["inject", "--config", str(conf)]) == EXIT_OK

    out = (tmp_path / "dist" / "sw.js").read_text(encoding="utf-8")
    assert out.startswith('self.__file_manifest = [\n  {\n    "url": "index.css",')
    assert out.endswith("];\n// sw body")
    assert capsys.readouterr().out.strip().endswith("sw.js")


def test_inject_flags_override_config(tmp_path: Path) -> None:
    conf = _init_site(tmp_path)
    dest = tmp_path / "other" / "worker.js"
    rc = main([
        "inject", "--config", str(conf),
        "--sw-dest", str(dest),
        "--glob-pattern", "index.html",
        "--variable-name", "self.precache",
        "--no-atomic",
    ])
    assert rc == EXIT_OK
    assert dest.read_text(encoding="utf-8") == (
        'self.precache = [\n  {\n    "url": "index.html",\n'
        f'    "revision": "{EMPTY_MD5}"\n  }}\n];\n// sw body'
    )


def test_entries_command(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    _init_site(tmp_path)
    rc = main(["entries", "--glob-directory", str(tmp_path / "build"), "--glob-pattern", "*.css"])
    assert rc == EXIT_OK
    assert json.loads(capsys.readouterr().out) == [{"url": "index.css", "revision": EMPTY_MD5}]


def test_hash_command(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    p = tmp_path / "empty.txt"
    p.write_bytes(b"")
    assert main(["hash", str(p)]) == EXIT_OK
    assert capsys.readouterr().out.strip() == EMPTY_MD5


def test_invalid_config_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    rc = main(["inject", "--glob-directory", str(tmp_path)])
    assert rc == EXIT_INVALID_ARGUMENT
    assert "invalid argument" in capsys.readouterr().err


def test_missing_sw_src_exit_code(tmp_path: Path) -> None:
    conf = _init_site(tmp_path)
    (tmp_path / "sw.js").unlink()
    assert main(["inject", "--config", str(conf)]) == EXIT_IO_ERROR
    assert not (tmp_path / "dist").exists()


def test_directory_creation_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    conf = _init_site(tmp_path)
    (tmp_path / "dist").write_text("file in the way", encoding="utf-8")
    assert main(["inject", "--config", str(conf)]) == EXIT_DIRECTORY_CREATION_FAILED
    assert "Unable to create the directory" in capsys.readouterr().err


def test_acquisition_exit_code(tmp_path: Path) -> None:
    conf = _init_site(tmp_path)
    rc = main(["inject", "--config", str(conf), "--glob-directory", str(tmp_path / "missing")])
    assert rc == EXIT_ACQUISITION_FAILED


def test_entries_command_reads_config_without_script_paths(
    tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    _init_site(tmp_path)
    conf = tmp_path / "entries.json"
    conf.write_text(json.dumps({"globDirectory": "build", "globPatterns": ["*.html"]}), encoding="utf-8")

    assert main(["entries", "--config", str(conf)]) == EXIT_OK
    assert json.loads(capsys.readouterr().out) == [{"url": "index.html", "revision": EMPTY_MD5}]


def test_entries_command_rejects_unknown_config_key(
    tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    _init_site(tmp_path)
    conf = tmp_path / "entries.json"
    conf.write_text(json.dumps({"globDirectory": "build", "globPattern": "*.html"}), encoding="utf-8")

    assert main(["entries", "--config", str(conf)]) == EXIT_INVALID_ARGUMENT
    err = capsys.readouterr().err
    assert "glob_pattern" in err
    assert "sw_src" not in err
