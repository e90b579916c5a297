"""Backend selection and factories.

The registry keeps an ordered list of backend names. Detection walks the
list, loads each backend lazily from its import path and asks a probe Editor
whether it is usable; the first one that is wins. A backend whose library
cannot be imported simply counts as unavailable.

Every factory resolves the backend this way before building anything, so
editors, images, filters and drawing objects all match the same backend.

A process-wide default registry backs the module-level helpers; code that
needs a different order can build its own BackendRegistry.
"""

import importlib
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from imagesmith.backends import BACKEND_PATHS, GraphicsBackend
from imagesmith.config import ImagesmithSettings, get_default_settings
from imagesmith.core.editor import Editor
from imagesmith.core.filters import FILTER_TYPES, Filter
from imagesmith.domain import DRAWING_OBJECT_TYPES, DrawingObject, Image
from imagesmith.exceptions import (
    InvalidArgumentError,
    InvalidDrawingObjectError,
    InvalidFilterError,
    InvalidGeometryError,
    NoBackendAvailableError,
)
from imagesmith.io import read_image
from imagesmith.utils.logging import get_logger

logger = get_logger(__name__)

BackendTarget = str | type[GraphicsBackend]


class BackendRegistry:
    """Ordered backend candidates plus the factories that use them.

    Example:
        registry = BackendRegistry(["opencv", "pillow"])
        editor = registry.create_editor()
    """

    def __init__(
        self,
        names: Sequence[str] | None = None,
        settings: ImagesmithSettings | None = None,
    ) -> None:
        """Initialize registry.

        Args:
            names: Backend names in order of preference, default from settings
            settings: Settings handed to the editors this registry creates
        """
        self.settings = settings or get_default_settings()
        self._targets: dict[str, BackendTarget] = dict(BACKEND_PATHS)
        self._loaded: dict[str, GraphicsBackend] = {}
        self._names: list[str] = []
        self.set_backend_list(list(names) if names is not None else self.settings.backend.priority)

    @property
    def backend_list(self) -> list[str]:
        """Current backend order."""
        return list(self._names)

    def set_backend_list(self, names: list[str] | tuple[str, ...]) -> None:
        """Replace the backend order.

        Raises:
            InvalidArgumentError: If names is not a list of strings
        """
        if not isinstance(names, (list, tuple)) or not all(isinstance(n, str) for n in names):
            raise InvalidArgumentError(f"Backend list must be a list of names, got {names!r}")
        self._names = [name.strip().lower() for name in names]

    def register(self, name: str, target: BackendTarget) -> None:
        """Make a backend known under ``name``.

        Args:
            name: Backend name used in backend lists
            target: Backend class, or ``"module:ClassName"`` import path
        """
        key = name.strip().lower()
        self._targets[key] = target
        self._loaded.pop(key, None)

    def load_backend(self, name: str) -> GraphicsBackend | None:
        """Instantiate a backend by name.

        Returns:
            The backend, or None if the name is unknown or its library
            cannot be imported
        """
        key = name.strip().lower()
        if key in self._loaded:
            return self._loaded[key]

        target = self._targets.get(key)
        if target is None:
            logger.debug("Unknown backend", backend=key)
            return None

        if isinstance(target, str):
            module_name, _, class_name = target.partition(":")
            try:
                module = importlib.import_module(module_name)
            except ImportError as e:
                logger.debug("Backend import failed", backend=key, error=str(e))
                return None
            target = getattr(module, class_name)

        backend = target()
        self._loaded[key] = backend
        return backend

    def detect_available(self, candidates: Sequence[str] | None = None) -> str:
        """Return the first usable backend name.

        Args:
            candidates: Names to try in order, default the registry's list

        Raises:
            NoBackendAvailableError: If none of the candidates is usable
        """
        names = self.backend_list if candidates is None else list(candidates)

        for name in names:
            key = name.strip().lower()
            backend = self.load_backend(key)
            if backend is None:
                continue
            if Editor(backend, self.settings).is_available():
                logger.debug("Backend selected", backend=key, candidates=names)
                return key
            logger.debug("Backend not available", backend=key)

        raise NoBackendAvailableError(names)

    def get_backend(self, candidates: Sequence[str] | None = None) -> GraphicsBackend:
        """Return the first usable backend instance."""
        return self._loaded[self.detect_available(candidates)]

    # Factories

    def create_editor(self, candidates: Sequence[str] | None = None) -> Editor:
        """Create an empty Editor on the first usable backend."""
        return Editor(self.get_backend(candidates), self.settings)

    def create_image(self, path: str | Path) -> Image:
        """Load an image file with the first usable backend."""
        return read_image(path, self.get_backend())

    def create_blank_image(self, width: int = 1, height: int = 1) -> Image:
        """Allocate an opaque black image with the first usable backend."""
        backend = self.get_backend()
        for label, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidArgumentError(f"{label} must be a positive int, got {value!r}")
        return backend.create_blank(width, height)

    def create_filter(self, name: str) -> Filter:
        """Create a filter by name: "Dither", "Grayscale" or "Sobel".

        Raises:
            NoBackendAvailableError: If no backend is usable
            InvalidFilterError: If the name is unknown
        """
        self.detect_available()
        filter_class = FILTER_TYPES.get(name)
        if filter_class is None:
            raise InvalidFilterError(name)
        return filter_class()

    def create_drawing_object(self, name: str, *args: Any, **kwargs: Any) -> DrawingObject:
        """Create a drawing object by class name.

        Remaining arguments go to the shape's constructor, e.g.
        ``create_drawing_object("Line", (0, 0), (10, 10), 1, "#FF0000")``.

        Raises:
            NoBackendAvailableError: If no backend is usable
            InvalidDrawingObjectError: If the name is unknown
            InvalidGeometryError: If the arguments do not fit the shape
        """
        self.detect_available()
        shape_class = DRAWING_OBJECT_TYPES.get(name)
        if shape_class is None:
            raise InvalidDrawingObjectError(name)

        try:
            return shape_class(*args, **kwargs)
        except TypeError as e:
            raise InvalidGeometryError(name, str(e)) from e


default_registry = BackendRegistry()


def set_backend_list(names: list[str] | tuple[str, ...]) -> None:
    """Set the backend order of the default registry."""
    default_registry.set_backend_list(names)


def detect_available_backend(candidates: Sequence[str] | None = None) -> str:
    """Name of the first usable backend in the default registry."""
    return default_registry.detect_available(candidates)


def create_editor(candidates: Sequence[str] | None = None) -> Editor:
    return default_registry.create_editor(candidates)


def create_image(path: str | Path) -> Image:
    return default_registry.create_image(path)


def create_blank_image(width: int = 1, height: int = 1) -> Image:
    return default_registry.create_blank_image(width, height)


def create_filter(name: str) -> Filter:
    return default_registry.create_filter(name)


def create_drawing_object(name: str, *args: Any, **kwargs: Any) -> DrawingObject:
    return default_registry.create_drawing_object(name, *args, **kwargs)
