"""Core editing algorithms for imagesmith.

This module contains:

- Position resolution for crop, overlay and fill-resize
- Resize planning for the five resize modes
- Drawing object rendering
- Filters (Grayscale, Dither, Sobel)
- Difference hashing and pixel-exact comparison
- The fluent Editor and the backend registry

Key functions:
- resolve_axis / resolve_position: Symbolic or numeric position to pixel offset
- plan_resize: Target geometry for a resize mode
- difference_hash: 64-bit perceptual hash of an image
- compare / equal: Perceptual distance and exact equality

Key classes:
- Editor: Single-image fluent editor
- BackendRegistry: Backend detection and factories
"""

from imagesmith.core.compare import (
    PerceptualHash,
    compare,
    difference_hash,
    equal,
)
from imagesmith.core.editor import Editor
from imagesmith.core.filters import FILTER_TYPES, Dither, Filter, Grayscale, Sobel
from imagesmith.core.geometry import (
    Position,
    parse_extent,
    resolve_axis,
    resolve_position,
    round_half_away,
)
from imagesmith.core.registry import BackendRegistry, default_registry
from imagesmith.core.render import render
from imagesmith.core.resize import ResizeMode, ResizePlan, plan_resize, resample

__all__ = [
    # Editor and registry
    "BackendRegistry",
    "Editor",
    "default_registry",
    # Filters
    "FILTER_TYPES",
    "Dither",
    "Filter",
    "Grayscale",
    "Sobel",
    # Geometry
    "Position",
    "parse_extent",
    "resolve_axis",
    "resolve_position",
    "round_half_away",
    # Resize
    "ResizeMode",
    "ResizePlan",
    "plan_resize",
    "resample",
    # Comparison
    "PerceptualHash",
    "compare",
    "difference_hash",
    "equal",
    # Drawing
    "render",
]
