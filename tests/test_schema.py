from __future__ import annotations

import re
from pathlib import Path

import pytest

from swmanifest.config import load_config_file, normalize_keys, with_defaults
from swmanifest.errors import InvalidArgumentError, TransformError
from swmanifest.schema import validate_config, validate_entries, validate_source_config

BASE = {"sw_src": "src/sw.js", "sw_dest": "build/sw.js", "glob_directory": "build"}


def test_minimal_config_is_valid() -> None:
    validate_config(dict(BASE))
    validate_config({**BASE, "sw_src": Path("src/sw.js")})


def test_full_config_is_valid() -> None:
    validate_config({
        **BASE,
        "glob_patterns": ["**/*.{js,css,html}"],
        "glob_ignores": "admin.html",
        "templated_urls": {"/": ["index.html"], "/about": "v1"},
        "modify_url_prefix": {"build/": "/"},
        "maximum_file_size_to_cache_in_bytes": 4096,
        "dont_cache_bust_urls_matching": re.compile(r"\.\w{8}\."),
        "manifest_transforms": [lambda m: m],
        "manifest_variable_name": "self.__precacheManifest",
    })


@pytest.mark.parametrize(
    "patch, where",
    [
        ({"glob_directory": None}, "/glob_directory"),
        ({"sw_src": ""}, "/sw_src"),
        ({"glob_patterns": "**/*.js"}, "/glob_patterns"),
        ({"glob_patterns": []}, "/glob_patterns"),
        ({"templated_urls": {"/": 3}}, "/templated_urls/~1"),
        ({"maximum_file_size_to_cache_in_bytes": "2MB"}, "/maximum_file_size_to_cache_in_bytes"),
        ({"maximum_file_size_to_cache_in_bytes": True}, "/maximum_file_size_to_cache_in_bytes"),
        ({"dont_cache_bust_urls_matching": "("}, "/dont_cache_bust_urls_matching"),
        ({"manifest_transforms": ["not callable"]}, "/manifest_transforms/0"),
        ({"manifest_variable_name": "self manifest"}, "/manifest_variable_name"),
        ({"unknown_option": 1}, "/"),
    ],
)
def test_invalid_configs(patch: dict, where: str) -> None:
    with pytest.raises(InvalidArgumentError) as ei:
        validate_config({**BASE, **patch})
    assert f"{where}: " in str(ei.value)
    assert ei.value.code == "invalid-prepend-manifest-arg"


def test_missing_required_keys_reported_in_order() -> None:
    with pytest.raises(InvalidArgumentError) as ei:
        validate_config({})
    msg = str(ei.value)
    assert msg.index("'glob_directory'") < msg.index("'sw_dest'") < msg.index("'sw_src'")


def test_validate_entries() -> None:
    validate_entries([{"url": "a.js", "revision": "1"}, {"url": "b.js"}, {"url": "c.js", "revision": None}])
    with pytest.raises(TransformError):
        validate_entries([{"url": ""}])
    with pytest.raises(TransformError):
        validate_entries({"url": "a.js"})


def test_normalize_keys_and_defaults() -> None:
    cfg = normalize_keys({"swSrc": "a", "globDirectory": "b", "manifestVariable": "x", "sw_dest": "c"})
    assert cfg == {"sw_src": "a", "glob_directory": "b", "manifest_variable_name": "x", "sw_dest": "c"}

    full = with_defaults(cfg)
    assert full["glob_patterns"] == ["**/*.{js,css}"]
    assert full["maximum_file_size_to_cache_in_bytes"] == 2 * 1024 * 1024
    assert full["manifest_variable_name"] == "x"
    assert "glob_patterns" not in cfg


def test_load_config_file_resolves_relative_paths(tmp_path: Path) -> None:
    conf = tmp_path / "conf" / "sw.json"
    conf.parent.mkdir()
    conf.write_text(
        '{"swSrc": "src/sw.js", "swDest": "/abs/sw.js", "globDirectory": "build",'
        ' "dontCacheBustUrlsMatching": "\\\\.\\\\w{8}\\\\."}',
        encoding="utf-8",
    )
    cfg = load_config_file(conf)
    assert cfg["sw_src"] == str(conf.parent.resolve() / "src" / "sw.js")
    assert cfg["sw_dest"] == "/abs/sw.js"
    assert cfg["glob_directory"] == str(conf.parent.resolve() / "build")
    assert cfg["dont_cache_bust_urls_matching"] == r"\.\w{8}\."
    validate_config(cfg)


def test_source_config_does_not_need_script_paths() -> None:
    validate_source_config({"glob_directory": "build"})
    validate_source_config(dict(BASE))
    validate_source_config({"glob_directory": "build", "glob_patterns": ["*.css"]})


@pytest.mark.parametrize(
    "cfg, needle",
    [
        ({}, "'glob_directory' is a required property"),
        ({"glob_directory": "build", "sw_src": ""}, "/sw_src"),
        ({"glob_directory": "build", "swDest": "x.js"}, "swDest"),
    ],
)
def test_invalid_source_configs(cfg: dict, needle: str) -> None:
    with pytest.raises(InvalidArgumentError) as ei:
        validate_source_config(cfg)
    assert needle in str(ei.value)


def test_script_paths_still_required_for_prepend() -> None:
    with pytest.raises(InvalidArgumentError) as ei:
        validate_config({"glob_directory": "build"})
    msg = str(ei.value)
    assert "'sw_src' is a required property" in msg
    assert "'sw_dest' is a required property" in msg
