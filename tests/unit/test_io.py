"""Unit tests for the image I/O layer.

Tests for type inference, save type resolution, quality clamping and the
error wrapping in read_image and write_image.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from imagesmith.domain import Image, ImageType
from imagesmith.exceptions import DirectoryCreateError, ImageLoadError, ImageSaveError
from imagesmith.io.reader import infer_image_type, read_image
from imagesmith.io.writer import clamp_quality, ensure_directory, resolve_save_type, write_image


def make_image(image_type: ImageType = ImageType.UNKNOWN) -> Image:
    return Image(core=object(), width=4, height=4, backend="mock", image_type=image_type)


class TestInferImageType:
    """Tests for infer_image_type."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("photo.jpg", ImageType.JPEG),
            ("photo.JPEG", ImageType.JPEG),
            ("logo.png", ImageType.PNG),
            ("anim.Gif", ImageType.GIF),
            ("notes.txt", ImageType.UNKNOWN),
            ("no_extension", ImageType.UNKNOWN),
        ],
    )
    def test_extensions(self, name: str, expected: ImageType) -> None:
        """Test extensions are matched case-insensitively."""
        assert infer_image_type(name) == expected


class TestResolveSaveType:
    """Tests for resolve_save_type."""

    def test_explicit_type_wins(self):
        """Test an explicit type overrides the extension."""
        assert resolve_save_type(Path("a.png"), "gif", make_image()) == ImageType.GIF
        assert resolve_save_type(Path("a.png"), ImageType.JPEG, make_image()) == ImageType.JPEG

    def test_unknown_explicit_type_is_jpeg(self):
        """Test an unrecognized explicit type falls back to JPEG."""
        assert resolve_save_type(Path("a.png"), "tiff", make_image()) == ImageType.JPEG

    def test_extension(self):
        """Test the extension decides when no type is given."""
        assert resolve_save_type(Path("a.png"), None, make_image(ImageType.GIF)) == ImageType.PNG

    def test_source_type(self):
        """Test the source type decides when the extension is unknown."""
        assert resolve_save_type(Path("a.out"), None, make_image(ImageType.GIF)) == ImageType.GIF

    def test_default_jpeg(self):
        """Test JPEG is used when nothing else is known."""
        assert resolve_save_type(Path("a.out"), None, make_image()) == ImageType.JPEG


class TestClampQuality:
    """Tests for clamp_quality."""

    @pytest.mark.parametrize(
        ("quality", "expected"),
        [(None, 75), (50, 50), (150, 100), (-5, 0), (0, 0), (100, 100)],
    )
    def test_clamp(self, quality, expected):
        """Test values are clamped to 0-100."""
        assert clamp_quality(quality) == expected

    def test_custom_default(self):
        """Test None uses the given default."""
        assert clamp_quality(None, default=90) == 90


class TestEnsureDirectory:
    """Tests for ensure_directory."""

    def test_creates_nested(self, tmp_path):
        """Test nested directories are created."""
        target = tmp_path / "a" / "b" / "c"
        ensure_directory(target)
        assert target.is_dir()

    def test_existing_directory(self, tmp_path):
        """Test an existing directory is left alone."""
        ensure_directory(tmp_path)
        assert tmp_path.is_dir()

    def test_blocked_by_file(self, tmp_path):
        """Test a file in the way raises DirectoryCreateError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(DirectoryCreateError) as exc_info:
            ensure_directory(blocker / "sub")
        assert exc_info.value.path == str(blocker / "sub")


class TestReadImage:
    """Tests for read_image."""

    def test_missing_file(self, tmp_path):
        """Test a missing file raises ImageLoadError."""
        backend = MagicMock()
        with pytest.raises(ImageLoadError, match="file not found"):
            read_image(tmp_path / "missing.png", backend)
        backend.read.assert_not_called()

    def test_directory(self, tmp_path):
        """Test a directory is not an image."""
        with pytest.raises(ImageLoadError, match="not a file"):
            read_image(tmp_path, MagicMock())

    def test_backend_receives_inferred_type(self, tmp_path):
        """Test the backend is called with the path and inferred type."""
        path = tmp_path / "in.gif"
        path.write_bytes(b"GIF89a")
        backend = MagicMock()
        backend.read.return_value = make_image(ImageType.GIF)

        read_image(str(path), backend)

        backend.read.assert_called_once_with(path, ImageType.GIF)

    def test_decode_error_wrapped(self, tmp_path):
        """Test decoder failures become ImageLoadError."""
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")
        backend = MagicMock()
        backend.read.side_effect = OSError("cannot identify image file")

        with pytest.raises(ImageLoadError) as exc_info:
            read_image(path, backend)

        assert exc_info.value.reason == "cannot identify image file"
        assert isinstance(exc_info.value.__cause__, OSError)


class TestWriteImage:
    """Tests for write_image."""

    def test_passes_resolved_options(self, tmp_path):
        """Test the backend receives the resolved type and clamped quality."""
        backend = MagicMock()
        image = make_image()
        target = tmp_path / "out" / "thumb.jpg"

        written = write_image(image, target, backend, quality=120, interlace=True)

        assert written == ImageType.JPEG
        assert target.parent.is_dir()
        backend.write.assert_called_once_with(image, target, ImageType.JPEG, 100, True)

    def test_default_quality(self, tmp_path):
        """Test default_quality is used when quality is None."""
        backend = MagicMock()
        write_image(make_image(), tmp_path / "a.jpg", backend, default_quality=33)
        assert backend.write.call_args.args[3] == 33

    def test_encode_error_wrapped(self, tmp_path):
        """Test encoder failures become ImageSaveError."""
        backend = MagicMock()
        backend.write.side_effect = ValueError("unsupported mode")

        with pytest.raises(ImageSaveError, match="unsupported mode"):
            write_image(make_image(), tmp_path / "a.png", backend)

    @patch("imagesmith.io.writer.os.makedirs", side_effect=PermissionError(13, "Permission denied"))
    def test_directory_error(self, _mock_makedirs, tmp_path):  # noqa: ARG002
        """Test directory failures stop before the backend is called."""
        backend = MagicMock()

        with pytest.raises(DirectoryCreateError, match="Permission denied"):
            write_image(make_image(), tmp_path / "new" / "a.png", backend)

        backend.write.assert_not_called()
