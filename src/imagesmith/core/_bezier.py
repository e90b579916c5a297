"""Internal Bezier curve flattening algorithms.

Neither bundled backend draws Bezier curves natively, so curves are turned
into polylines here and drawn with the backend's line primitive.
This is an internal module; not intended for public use.
"""

import math

Coordinate = tuple[float, float]

# Subdivision stops at this depth even if the tolerance is not met
MAX_DEPTH = 16


def _mid(a: Coordinate, b: Coordinate) -> Coordinate:
    return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)


def flatten_quadratic(
    points: list[Coordinate], tolerance: float, depth: int = 0
) -> list[Coordinate]:
    """Flatten a quadratic Bezier curve using recursive subdivision.

    Args:
        points: List of 3 control points [p0, p1, p2]
        tolerance: Maximum distance from true curve, in pixels
        depth: Current recursion depth

    Returns:
        List of points approximating the curve, endpoints included
    """
    p0, p1, p2 = points

    # Curve midpoint (t=0.5) against the chord midpoint
    curve_mid = (
        0.25 * p0[0] + 0.5 * p1[0] + 0.25 * p2[0],
        0.25 * p0[1] + 0.5 * p1[1] + 0.25 * p2[1],
    )
    chord_mid = _mid(p0, p2)

    distance = math.hypot(curve_mid[0] - chord_mid[0], curve_mid[1] - chord_mid[1])
    if distance <= tolerance or depth >= MAX_DEPTH:
        return [p0, p2]

    # Subdivide at t=0.5
    left = flatten_quadratic([p0, _mid(p0, p1), curve_mid], tolerance, depth + 1)
    right = flatten_quadratic([curve_mid, _mid(p1, p2), p2], tolerance, depth + 1)

    # Combine, avoiding duplicate midpoint
    return left[:-1] + right


def flatten_cubic(
    points: list[Coordinate], tolerance: float, depth: int = 0
) -> list[Coordinate]:
    """Flatten a cubic Bezier curve using recursive subdivision.

    Uses De Casteljau's algorithm for subdivision.

    Args:
        points: List of 4 control points [p0, p1, p2, p3]
        tolerance: Maximum distance from true curve, in pixels
        depth: Current recursion depth

    Returns:
        List of points approximating the curve, endpoints included
    """
    p0, p1, p2, p3 = points

    # First level
    q1 = _mid(p0, p1)
    q2 = _mid(p1, p2)
    q3 = _mid(p2, p3)

    # Second level
    r1 = _mid(q1, q2)
    r2 = _mid(q2, q3)

    # Third level (curve point at t=0.5)
    mid = _mid(r1, r2)

    chord_mid = _mid(p0, p3)
    distance = math.hypot(mid[0] - chord_mid[0], mid[1] - chord_mid[1])

    # A flat-looking midpoint can hide an S-curve, so the control points
    # must also lie close to the chord before the segment is accepted
    ctrl_spread = max(
        math.hypot(p1[0] - chord_mid[0], p1[1] - chord_mid[1]),
        math.hypot(p2[0] - chord_mid[0], p2[1] - chord_mid[1]),
    )
    chord_half = math.hypot(p3[0] - p0[0], p3[1] - p0[1]) / 2
    flat = distance <= tolerance and ctrl_spread <= chord_half + tolerance

    if flat or depth >= MAX_DEPTH:
        return [p0, p3]

    left = flatten_cubic([p0, q1, r1, mid], tolerance, depth + 1)
    right = flatten_cubic([mid, r2, q3, p3], tolerance, depth + 1)

    return left[:-1] + right
