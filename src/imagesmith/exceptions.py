"""Exception hierarchy for imagesmith."""


class ImagesmithError(Exception):
    """Base exception for all imagesmith errors."""

    pass


class NoActiveImageError(ImagesmithError):
    """An operation needs an open image but the editor has none."""

    def __init__(self, operation: str | None = None) -> None:
        self.operation = operation
        if operation:
            super().__init__(f"No image to edit: '{operation}' needs an open image")
        else:
            super().__init__("No image to edit")


class InvalidArgumentError(ImagesmithError, ValueError):
    """An argument was rejected before any surface was touched."""

    pass


class InvalidResizeModeError(InvalidArgumentError):
    """Unknown resize mode name."""

    def __init__(self, mode: str) -> None:
        self.mode = mode
        super().__init__(f'Invalid resize mode "{mode}"')


class InvalidDrawingObjectError(InvalidArgumentError):
    """Unknown drawing object name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Invalid drawing object name '{name}'")


class InvalidFilterError(InvalidArgumentError):
    """Unknown filter name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Invalid filter name '{name}'")


class InvalidGeometryError(InvalidArgumentError):
    """Drawing object geometry cannot be rendered."""

    def __init__(self, shape: str, reason: str) -> None:
        self.shape = shape
        self.reason = reason
        super().__init__(f"Invalid {shape} geometry: {reason}")


class NoBackendAvailableError(ImagesmithError):
    """None of the candidate graphics backends is usable."""

    def __init__(self, candidates: list[str]) -> None:
        self.candidates = list(candidates)
        tried = ", ".join(self.candidates) if self.candidates else "none"
        super().__init__(f"No supported backend (tried: {tried})")


class ImageIOError(ImagesmithError):
    """Errors reading or writing image files."""

    action = "Image I/O failed for"

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{self.action} '{path}': {reason}")


class ImageLoadError(ImageIOError):
    """Error loading an image file."""

    action = "Failed to load image"


class ImageSaveError(ImageIOError):
    """Error saving an image file."""

    action = "Failed to save image"


class DirectoryCreateError(ImageIOError):
    """Target directory for a save could not be created."""

    action = "Cannot create directory"
