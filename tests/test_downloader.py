"""Tests for altinn_sync.downloader."""

from __future__ import annotations

import pytest

from altinn_sync.downloader import FileDownloader
from altinn_sync.errors import StorageError


class TestFileDownloader:
    @pytest.mark.asyncio
    async def test_writes_bytes(self, tmp_path):
        path = await FileDownloader().save(str(tmp_path), "2024-01-02T09:00:00-doc.pdf", b"%PDF-1.4")
        assert path == tmp_path / "2024-01-02T09:00:00-doc.pdf"
        assert path.read_bytes() == b"%PDF-1.4"

    @pytest.mark.asyncio
    async def test_rerun_leaves_single_file(self, tmp_path):
        downloader = FileDownloader()
        for _ in range(3):
            await downloader.save(str(tmp_path), "a.pdf", b"same")
        assert [p.name for p in tmp_path.iterdir()] == ["a.pdf"]
        assert (tmp_path / "a.pdf").read_bytes() == b"same"

    @pytest.mark.asyncio
    async def test_overwrites_existing_content(self, tmp_path):
        (tmp_path / "a.pdf").write_bytes(b"old and longer")
        await FileDownloader().save(str(tmp_path), "a.pdf", b"new")
        assert (tmp_path / "a.pdf").read_bytes() == b"new"

    @pytest.mark.asyncio
    async def test_missing_directory_raises_storage_error(self, tmp_path):
        with pytest.raises(StorageError) as excinfo:
            await FileDownloader().save(str(tmp_path / "missing"), "a.pdf", b"x")
        assert excinfo.value.kind == "io"
