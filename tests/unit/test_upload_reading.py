"""
Unit tests for bounded reading of uploaded files.
"""
import pytest

from pdf_qa.exceptions import PayloadTooLargeError
from pdf_qa.main import read_upload

pytestmark = pytest.mark.unit


class StreamingUpload:
    """Upload without a known size that records how much was read."""

    def __init__(self, content: bytes):
        self.filename = "stream.pdf"
        self.size = None
        self.content = content
        self.position = 0

    async def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = len(self.content) - self.position
        chunk = self.content[self.position:self.position + size]
        self.position += len(chunk)
        return chunk


class TestReadUpload:

    @pytest.mark.asyncio
    async def test_reads_whole_file_within_limit(self):
        upload = StreamingUpload(b"%PDF-1.4\n" * 100)

        assert await read_upload(upload, max_bytes=10_000, chunk_size=64) == b"%PDF-1.4\n" * 100

    @pytest.mark.asyncio
    async def test_file_exactly_at_limit_is_accepted(self):
        upload = StreamingUpload(b"x" * 256)

        assert len(await read_upload(upload, max_bytes=256, chunk_size=100)) == 256

    @pytest.mark.asyncio
    async def test_stops_reading_once_limit_is_exceeded(self):
        upload = StreamingUpload(b"x" * 10_000)

        with pytest.raises(PayloadTooLargeError):
            await read_upload(upload, max_bytes=1000, chunk_size=256)

        assert upload.position == 1024
