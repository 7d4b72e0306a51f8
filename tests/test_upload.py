"""Tests for video upload payloads."""

from __future__ import annotations

import pytest

from vorma.analysis.errors import InvalidVideoError
from vorma.analysis.upload import VideoUpload, format_file_size, validate_video


class TestVideoUpload:
    """Tests for VideoUpload."""

    def test_from_path(self, temp_dir):
        """Test reading a file guesses its MIME type."""
        path = temp_dir / "walk.mp4"
        path.write_bytes(b"fake video bytes")

        upload = VideoUpload.from_path(path)

        assert upload.filename == "walk.mp4"
        assert upload.content == b"fake video bytes"
        assert upload.content_type == "video/mp4"
        assert upload.size == 16
        assert upload.is_video

    def test_unknown_extension(self, temp_dir):
        path = temp_dir / "walk.unknownext"
        path.write_bytes(b"x")

        upload = VideoUpload.from_path(path)

        assert upload.content_type == "application/octet-stream"
        assert not upload.is_video


class TestValidateVideo:
    """Tests for upload validation."""

    def test_valid(self, video_upload):
        assert validate_video(video_upload) is video_upload

    def test_not_a_video(self):
        upload = VideoUpload("notes.txt", b"hello", "text/plain")
        with pytest.raises(InvalidVideoError, match="not a video"):
            validate_video(upload)

    def test_empty(self):
        upload = VideoUpload("empty.mp4", b"", "video/mp4")
        with pytest.raises(InvalidVideoError, match="empty"):
            validate_video(upload)


class TestFormatFileSize:
    """Tests for human-readable sizes."""

    @pytest.mark.parametrize(
        "num_bytes, expected",
        [
            (0, "0 Bytes"),
            (500, "500 Bytes"),
            (1024, "1 KB"),
            (1536, "1.5 KB"),
            (10 * 1024 * 1024, "10 MB"),
            (int(2.25 * 1024**3), "2.25 GB"),
        ],
    )
    def test_format(self, num_bytes, expected):
        assert format_file_size(num_bytes) == expected
