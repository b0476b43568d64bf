"""Tests for format detection, output paths and atomic writes."""

import os

import pytest

from langbly_sync.project.generator import (
    default_source_root,
    detect_format,
    read_existing_file,
    resolve_output_path,
    write_file_atomic,
)


@pytest.mark.parametrize(
    "path,expected",
    [
        ("docs/intro.md", "markdown"),
        ("docs/page.MDX", "markdown"),
        ("locales/en.yaml", "yaml"),
        ("locales/en.yml", "yaml"),
        ("locales/en.json", "json"),
        ("locales/en", "json"),
    ],
)
def test_detect_format(path, expected):
    assert detect_format(path) == expected


def test_resolve_simple_pattern():
    assert resolve_output_path("locales/{lang}.json", "fr", "locales/en.json") == "locales/fr.json"


def test_resolve_glob_pattern_keeps_relative_path():
    output = resolve_output_path("docs/{lang}/**/*.md", "fr", "docs/en/guide/setup.md", source_root="docs/en")
    assert output == os.path.join("docs/fr/", "guide/setup.md")


def test_default_source_root():
    assert default_source_root(["docs/en/a.md", "docs/en/guide/b.md"]) == os.path.join("docs", "en")
    assert default_source_root(["docs/en/a.md"]) == os.path.join("docs", "en")


def test_write_file_atomic_creates_directories(tmp_path):
    target = tmp_path / "nested/dir/fr.json"
    write_file_atomic(target, '{"a": "b"}\n')
    assert target.read_text(encoding="utf-8") == '{"a": "b"}\n'
    assert [p.name for p in target.parent.iterdir()] == ["fr.json"]


def test_write_file_atomic_replaces_existing(tmp_path):
    target = tmp_path / "fr.json"
    target.write_text("old", encoding="utf-8")
    write_file_atomic(target, "new")
    assert target.read_text(encoding="utf-8") == "new"


def test_read_existing_file_missing_returns_none(tmp_path):
    assert read_existing_file(tmp_path / "missing.json") is None
