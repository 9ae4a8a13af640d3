"""Tests for flowlint.core.discovery - glob matching and project-root detection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from flowlint.core.discovery import find_project_root, matches_glob, scan_directory

if TYPE_CHECKING:
    from pathlib import Path


# ---------------------------------------------------------------------------
# Glob matching
# ---------------------------------------------------------------------------


class TestMatchesGlob:
    @pytest.mark.parametrize(
        ("path", "pattern", "expected"),
        [
            ("a.xml", "**/*.xml", True),
            ("src/main/mule/a.xml", "**/*.xml", True),
            ("src/main/mule/a.xml", "src/main/mule/**/*.xml", True),
            ("src/main/mule/impl/a.xml", "src/main/mule/**/*.xml", True),
            ("src/main/resources/a.xml", "src/main/mule/**/*.xml", False),
            ("src/test/munit/a.xml", "**/test/**", True),
            ("target/classes/a.xml", "**/target/**", True),
            ("flows/a.munit.xml", "**/*.munit.xml", True),
            ("a.xml", "*.xml", True),
            ("dir/a.xml", "*.xml", False),
            ("a.yaml", "**/*.xml", False),
        ],
    )
    def test_patterns(self, path: str, pattern: str, expected: bool) -> None:
        assert matches_glob(path, pattern) is expected


# ---------------------------------------------------------------------------
# Directory scanning
# ---------------------------------------------------------------------------


class TestScanDirectory:
    def test_include_and_exclude(self, tmp_path: Path) -> None:
        mule_dir = tmp_path / "src" / "main" / "mule"
        mule_dir.mkdir(parents=True)
        (mule_dir / "b.xml").write_text("<mule/>")
        (mule_dir / "a.xml").write_text("<mule/>")
        (mule_dir / "notes.txt").write_text("x")
        (mule_dir / "a.munit.xml").write_text("<mule/>")
        (tmp_path / "pom.xml").write_text("<project/>")

        found = scan_directory(
            tmp_path,
            include=["src/main/mule/**/*.xml"],
            exclude=["**/*.munit.xml"],
        )
        assert [f.relative_path for f in found] == ["src/main/mule/a.xml", "src/main/mule/b.xml"]
        assert all(f.size > 0 for f in found)

    def test_sorted_by_relative_path(self, tmp_path: Path) -> None:
        for name in ("z.xml", "m.xml", "a.xml"):
            (tmp_path / name).write_text("<mule/>")
        found = scan_directory(tmp_path, include=["**/*.xml"], exclude=[])
        assert [f.relative_path for f in found] == ["a.xml", "m.xml", "z.xml"]

    def test_single_file_root(self, tmp_path: Path) -> None:
        target = tmp_path / "only.xml"
        target.write_text("<mule/>")
        found = scan_directory(target, include=["nothing/*"], exclude=[])
        assert len(found) == 1
        assert found[0].relative_path == "only.xml"
        assert found[0].absolute_path == target.resolve()

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            scan_directory(tmp_path / "missing")


# ---------------------------------------------------------------------------
# Project root detection
# ---------------------------------------------------------------------------


class TestFindProjectRoot:
    @pytest.mark.parametrize("marker", ["pom.xml", "mule-artifact.json"])
    def test_walks_up_to_marker(self, tmp_path: Path, marker: str) -> None:
        (tmp_path / marker).write_text("{}")
        nested = tmp_path / "src" / "main" / "mule"
        nested.mkdir(parents=True)
        assert find_project_root(nested) == tmp_path.resolve()

    def test_no_marker(self, tmp_path: Path) -> None:
        nested = tmp_path / "loose"
        nested.mkdir()
        # tmp_path lives under the system temp dir, which has no markers
        assert find_project_root(nested) is None
