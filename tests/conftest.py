"""Pytest configuration and shared fixtures."""

import zipfile
from pathlib import Path

import pytest

from tablecast.core.schema.models import Schema


@pytest.fixture
def write_csv(tmp_path: Path):
    """Return a helper that writes CSV text to a file under tmp_path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8", newline="")
        return path

    return _write


@pytest.fixture
def people_csv(write_csv) -> Path:
    """A small, valid CSV file with id, name and score columns."""
    return write_csv(
        "people.csv",
        "id,name,score\r\n1,Alice,95.5\r\n2,Bob,87\r\n3,Charlie,92.25\r\n",
    )


@pytest.fixture
def people_schema() -> Schema:
    """Schema matching people_csv."""
    return Schema.from_descriptor(
        {
            "fields": [
                {"name": "id", "type": "integer", "constraints": {"required": True, "unique": True}},
                {"name": "name", "type": "string"},
                {"name": "score", "type": "number", "constraints": {"minimum": 0, "maximum": 100}},
            ]
        }
    )


@pytest.fixture
def people_zip(tmp_path: Path) -> Path:
    """A zip archive holding people data under data/people.csv."""
    archive = tmp_path / "bundle.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("data/people.csv", "id,name\r\n1,Alice\r\n2,Bob\r\n")
    return archive
