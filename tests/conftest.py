"""Shared test fixtures for flowlint."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def tmp_project(tmp_path: Path) -> Path:
    """Create a minimal, well-formed Mule project layout."""
    project = tmp_path / "proj"
    (project / "src" / "main" / "mule").mkdir(parents=True)
    (project / "src" / "main" / "resources").mkdir(parents=True)
    (project / "pom.xml").write_text(
        "<project><build><plugins><plugin>"
        "<artifactId>mule-maven-plugin</artifactId>"
        "</plugin></plugins></build></project>\n"
    )
    return project
