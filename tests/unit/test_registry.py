"""Unit tests for backend detection and the factory helpers."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image as PILImage

from imagesmith.backends.pillow import PillowBackend
from imagesmith.core import BackendRegistry, Editor
from imagesmith.core.filters import Dither, Grayscale, Sobel
from imagesmith.domain import Color, Line, Rectangle
from imagesmith.exceptions import (
    InvalidArgumentError,
    InvalidDrawingObjectError,
    InvalidFilterError,
    InvalidGeometryError,
    NoBackendAvailableError,
)


class UnavailableBackend(PillowBackend):
    """Backend that is importable but reports itself unusable."""

    name = "broken"

    def is_available(self) -> bool:
        return False


class RenamedPillowBackend(PillowBackend):
    name = "custom"


@pytest.fixture
def registry() -> BackendRegistry:
    return BackendRegistry(["pillow"])


class TestBackendList:
    """Tests for the backend order."""

    def test_default_order(self) -> None:
        """Test the default order tries pillow before opencv."""
        assert BackendRegistry().backend_list == ["pillow", "opencv"]

    def test_names_normalized(self) -> None:
        """Test names are lowercased and stripped."""
        assert BackendRegistry([" Pillow ", "OPENCV"]).backend_list == ["pillow", "opencv"]

    def test_set_backend_list(self, registry: BackendRegistry) -> None:
        """Test the order can be replaced."""
        registry.set_backend_list(("opencv", "pillow"))
        assert registry.backend_list == ["opencv", "pillow"]

    def test_backend_list_is_a_copy(self, registry: BackendRegistry) -> None:
        """Test mutating the returned list does not change the registry."""
        registry.backend_list.append("opencv")
        assert registry.backend_list == ["pillow"]

    @pytest.mark.parametrize("names", ["pillow", None, ["pillow", 3], 42])
    def test_set_backend_list_rejects_non_lists(
        self, registry: BackendRegistry, names: object
    ) -> None:
        """Test anything but a list of strings is rejected."""
        with pytest.raises(InvalidArgumentError):
            registry.set_backend_list(names)  # type: ignore[arg-type]


class TestLoadBackend:
    """Tests for lazy backend loading."""

    def test_load_known(self, registry: BackendRegistry) -> None:
        """Test a known name loads and is cached."""
        backend = registry.load_backend("pillow")
        assert isinstance(backend, PillowBackend)
        assert registry.load_backend("PILLOW") is backend

    def test_load_unknown(self, registry: BackendRegistry) -> None:
        """Test unknown names load as None."""
        assert registry.load_backend("skia") is None

    def test_import_failure_is_unavailable(self, registry: BackendRegistry) -> None:
        """Test a backend whose module cannot be imported is skipped."""
        registry.register("ghost", "imagesmith_missing_module:GhostBackend")
        assert registry.load_backend("ghost") is None

    def test_register_class(self, registry: BackendRegistry) -> None:
        """Test a backend class can be registered directly."""
        registry.register("Custom", RenamedPillowBackend)
        assert isinstance(registry.load_backend("custom"), RenamedPillowBackend)

    def test_register_replaces_cached(self, registry: BackendRegistry) -> None:
        """Test re-registering a name drops the cached instance."""
        first = registry.load_backend("pillow")
        registry.register("pillow", RenamedPillowBackend)
        assert registry.load_backend("pillow") is not first


class TestDetect:
    """Tests for backend detection."""

    def test_first_available_wins(self, registry: BackendRegistry) -> None:
        """Test the first usable candidate is chosen."""
        registry.register("broken", UnavailableBackend)
        registry.set_backend_list(["broken", "nonsense", "pillow"])
        assert registry.detect_available() == "pillow"

    def test_explicit_candidates(self, registry: BackendRegistry) -> None:
        """Test candidates override the registry's list."""
        assert registry.detect_available(["nonsense", "Pillow"]) == "pillow"

    def test_none_available(self, registry: BackendRegistry) -> None:
        """Test detection fails when nothing is usable."""
        registry.register("broken", UnavailableBackend)
        with pytest.raises(NoBackendAvailableError) as exc_info:
            registry.detect_available(["broken", "nonsense"])
        assert "broken" in str(exc_info.value)

    def test_empty_list(self) -> None:
        """Test an empty list has nothing to detect."""
        with pytest.raises(NoBackendAvailableError):
            BackendRegistry([]).detect_available()

    def test_probe_uses_backend_availability(self, registry: BackendRegistry) -> None:
        """Test detection asks the backend itself."""
        fake = MagicMock()
        fake.name = "fake"
        fake.is_available.return_value = True
        registry.register("fake", lambda: fake)

        assert registry.detect_available(["fake"]) == "fake"
        assert registry.get_backend(["fake"]) is fake
        fake.is_available.assert_called()

    def test_custom_name_resolves(self, registry: BackendRegistry) -> None:
        """Test a registered name with mixed case detects and loads."""
        registry.register("MyBackend", RenamedPillowBackend)
        assert isinstance(registry.get_backend(["MYBACKEND"]), RenamedPillowBackend)


class TestFactories:
    """Tests for create_* helpers."""

    def test_create_editor(self, registry: BackendRegistry) -> None:
        """Test editors are bound to the detected backend and empty."""
        editor = registry.create_editor()
        assert isinstance(editor, Editor)
        assert editor.backend.name == "pillow"
        assert editor.get_image() is None
        assert editor.settings is registry.settings

    def test_create_editor_no_backend(self) -> None:
        """Test editor creation fails without a usable backend."""
        with pytest.raises(NoBackendAvailableError):
            BackendRegistry(["nonsense"]).create_editor()

    def test_create_image(self, registry: BackendRegistry, tmp_path: Path) -> None:
        """Test loading an image through the registry."""
        path = tmp_path / "in.png"
        PILImage.new("RGB", (6, 3)).save(path)
        image = registry.create_image(path)
        assert image.size == (6, 3)
        assert image.backend == "pillow"

    def test_create_blank_image(self, registry: BackendRegistry) -> None:
        """Test blank images default to 1x1."""
        assert registry.create_blank_image().size == (1, 1)
        assert registry.create_blank_image(4, 2).size == (4, 2)

    @pytest.mark.parametrize(("width", "height"), [(0, 1), (1, -2), (1.5, 1), (True, 1)])
    def test_create_blank_image_invalid(
        self, registry: BackendRegistry, width: object, height: object
    ) -> None:
        """Test blank images need positive integer sizes."""
        with pytest.raises(InvalidArgumentError):
            registry.create_blank_image(width, height)  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("Dither", Dither), ("Grayscale", Grayscale), ("Sobel", Sobel)],
    )
    def test_create_filter(self, registry: BackendRegistry, name: str, expected: type) -> None:
        """Test filters are created by name."""
        assert isinstance(registry.create_filter(name), expected)

    def test_create_filter_unknown(self, registry: BackendRegistry) -> None:
        """Test unknown filter names are rejected."""
        with pytest.raises(InvalidFilterError, match="Blur"):
            registry.create_filter("Blur")

    def test_create_filter_needs_backend(self) -> None:
        """Test backend detection happens before the name lookup."""
        with pytest.raises(NoBackendAvailableError):
            BackendRegistry(["nonsense"]).create_filter("Blur")

    def test_create_drawing_object(self, registry: BackendRegistry) -> None:
        """Test shapes are created by class name with constructor arguments."""
        line = registry.create_drawing_object("Line", (0, 0), (10, 10), 2, "#FF0000")
        assert isinstance(line, Line)
        assert line.thickness == 2
        assert line.color == Color(255, 0, 0)

    def test_create_drawing_object_keywords(self, registry: BackendRegistry) -> None:
        """Test keyword arguments are passed through."""
        rect = registry.create_drawing_object("Rectangle", 5, 6, pos=(1, 2), fill_color=None)
        assert isinstance(rect, Rectangle)
        assert rect.pos == (1, 2)
        assert rect.fill_color is None

    def test_create_drawing_object_unknown(self, registry: BackendRegistry) -> None:
        """Test unknown shape names are rejected."""
        with pytest.raises(InvalidDrawingObjectError, match="Star"):
            registry.create_drawing_object("Star")

    def test_create_drawing_object_bad_arguments(self, registry: BackendRegistry) -> None:
        """Test wrong constructor arguments surface as geometry errors."""
        with pytest.raises(InvalidGeometryError):
            registry.create_drawing_object("Line", (0, 0))
