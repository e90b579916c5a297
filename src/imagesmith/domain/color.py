"""Color value type.

Colors are RGB triples with a separate alpha in the 0.0-1.0 range, where 0.0
is fully transparent and 1.0 is fully opaque. Backends translate this to
their own native alpha encoding.
"""

import re
from dataclasses import dataclass
from typing import Any

from imagesmith.exceptions import InvalidArgumentError

_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


@dataclass(frozen=True, slots=True)
class Color:
    """An immutable RGBA color.

    Attributes:
        r: Red channel, 0-255
        g: Green channel, 0-255
        b: Blue channel, 0-255
        alpha: Opacity, 0.0 (transparent) to 1.0 (opaque)
    """

    r: int
    g: int
    b: int
    alpha: float = 1.0

    def __post_init__(self) -> None:
        for channel, value in (("r", self.r), ("g", self.g), ("b", self.b)):
            if not 0 <= value <= 255:
                raise InvalidArgumentError(f"Color channel {channel}={value} is outside 0-255")
        if not 0.0 <= self.alpha <= 1.0:
            raise InvalidArgumentError(f"Color alpha={self.alpha} is outside 0.0-1.0")

    @classmethod
    def from_hex(cls, hex_string: str, alpha: float = 1.0) -> "Color":
        """Create a color from a hex string.

        Accepts ``#RRGGBB`` or the shorthand ``#RGB``; the leading ``#`` is
        optional.

        Args:
            hex_string: Hex color string
            alpha: Opacity, 0.0-1.0

        Returns:
            Color instance

        Raises:
            InvalidArgumentError: If the string is not a hex color
        """
        match = _HEX_PATTERN.match(hex_string.strip())
        if match is None:
            raise InvalidArgumentError(f"Invalid hex color '{hex_string}'")

        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)

        return cls(
            r=int(digits[0:2], 16),
            g=int(digits[2:4], 16),
            b=int(digits[4:6], 16),
            alpha=alpha,
        )

    @classmethod
    def parse(cls, value: Any) -> "Color | None":
        """Coerce a user-supplied color argument.

        Args:
            value: A Color, a hex string, or None

        Returns:
            Color instance, or None when value is None
        """
        if value is None or isinstance(value, Color):
            return value
        if isinstance(value, str):
            return cls.from_hex(value)
        raise InvalidArgumentError(f"Cannot interpret {value!r} as a color")

    def get_rgba(self) -> tuple[int, int, int, float]:
        """Return ``(r, g, b, alpha)``."""
        return (self.r, self.g, self.b, self.alpha)

    def get_hex_string(self) -> str:
        """Return the color as ``#rrggbb`` (alpha dropped)."""
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)
