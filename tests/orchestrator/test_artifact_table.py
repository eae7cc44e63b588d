"""Tests for the in-process artifact table."""

import pytest

from invoicehub.errors import ArtifactNotAvailableError
from invoicehub.orchestrator.artifacts import ArtifactTable
from invoicehub.scripts.base import BytesArtifact


def test_put_and_get():
    table = ArtifactTable()
    artifact = BytesArtifact(b"pdf")
    table.put("doc-1", artifact)

    assert table.get("doc-1") is artifact
    assert "doc-1" in table
    assert len(table) == 1


def test_get_missing_raises():
    with pytest.raises(ArtifactNotAvailableError) as exc_info:
        ArtifactTable().get("doc-1")
    assert exc_info.value.message_key == "downloadIsNotAvailable"


def test_find_missing_returns_none():
    assert ArtifactTable().find("doc-1") is None


def test_discard_counts_held_ids():
    table = ArtifactTable()
    table.put("a", BytesArtifact(b"a"))
    table.put("b", BytesArtifact(b"b"))

    assert table.discard(["a", "missing"]) == 1
    assert "a" not in table
    assert "b" in table


def test_clear():
    table = ArtifactTable()
    table.put("a", BytesArtifact(b"a"))
    table.put("b", BytesArtifact(b"b"))

    assert table.clear() == 2
    assert len(table) == 0
    assert table.clear() == 0
