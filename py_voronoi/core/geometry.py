"""
Planar geometry primitives for the triangulation engine.

The two predicates, ``orient2d`` and ``incircle``, share one tolerance
strategy: the floating-point determinant is trusted only when it clears
Shewchuk's static error bound, otherwise the determinant is re-evaluated
exactly with rational arithmetic. The sign returned by either predicate is
therefore exact, so the triangulator can never see an orientation test and
an in-circle test disagree about the same four points.
"""

from fractions import Fraction
from typing import List, NamedTuple, Sequence, Tuple

import numpy as np

_EPSILON = 2.0 ** -53
CCW_ERRBOUND = (3.0 + 16.0 * _EPSILON) * _EPSILON
ICC_ERRBOUND = (10.0 + 96.0 * _EPSILON) * _EPSILON


class Point(NamedTuple):
    """A 2D position."""
    x: float
    y: float


class BoundingBox(NamedTuple):
    """Axis aligned rectangle used for sampling and for clipping cells."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    def corners(self) -> List[Tuple[float, float]]:
        """Box corners in counter-clockwise order."""
        return [
            (self.min_x, self.min_y),
            (self.max_x, self.min_y),
            (self.max_x, self.max_y),
            (self.min_x, self.max_y),
        ]

    def contains(self, x: float, y: float) -> bool:
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    @classmethod
    def around(cls, points: np.ndarray, margin: float = 0.1) -> "BoundingBox":
        """
        Bounding box of ``points`` grown by ``margin`` times its extent.

        A flat or empty extent falls back to a unit margin so the box
        always has a positive area.
        """
        if len(points) == 0:
            return cls(-1.0, -1.0, 1.0, 1.0)

        min_x, min_y = points.min(axis=0)
        max_x, max_y = points.max(axis=0)
        pad = max(max_x - min_x, max_y - min_y) * margin
        if pad <= 0.0:
            pad = 1.0
        return cls(float(min_x - pad), float(min_y - pad),
                   float(max_x + pad), float(max_y + pad))


def orient2d(ax: float, ay: float, bx: float, by: float,
             cx: float, cy: float) -> float:
    """
    Orientation of the triangle ``a, b, c``.

    Returns a positive value when the points are counter-clockwise, a
    negative value when clockwise and exactly zero when collinear. The sign
    is exact; the magnitude is twice the signed area up to rounding.
    """
    detleft = (ax - cx) * (by - cy)
    detright = (ay - cy) * (bx - cx)
    det = detleft - detright
    errbound = CCW_ERRBOUND * (abs(detleft) + abs(detright))
    if det > errbound or -det > errbound:
        return float(det)
    return float(_orient2d_exact(ax, ay, bx, by, cx, cy))


def _orient2d_exact(ax, ay, bx, by, cx, cy) -> Fraction:
    ax, ay, bx, by, cx, cy = map(Fraction, (ax, ay, bx, by, cx, cy))
    return (ax - cx) * (by - cy) - (ay - cy) * (bx - cx)


def incircle(ax: float, ay: float, bx: float, by: float,
             cx: float, cy: float, dx: float, dy: float) -> float:
    """
    In-circle test of ``d`` against the circle through ``a, b, c``.

    For counter-clockwise ``a, b, c`` the result is positive when ``d`` lies
    strictly inside the circle, negative outside and exactly zero when the
    four points are cocircular. The sign flips for clockwise input.
    """
    adx = ax - dx
    ady = ay - dy
    bdx = bx - dx
    bdy = by - dy
    cdx = cx - dx
    cdy = cy - dy

    bdxcdy = bdx * cdy
    cdxbdy = cdx * bdy
    alift = adx * adx + ady * ady

    cdxady = cdx * ady
    adxcdy = adx * cdy
    blift = bdx * bdx + bdy * bdy

    adxbdy = adx * bdy
    bdxady = bdx * ady
    clift = cdx * cdx + cdy * cdy

    det = (alift * (bdxcdy - cdxbdy)
           + blift * (cdxady - adxcdy)
           + clift * (adxbdy - bdxady))
    permanent = ((abs(bdxcdy) + abs(cdxbdy)) * alift
                 + (abs(cdxady) + abs(adxcdy)) * blift
                 + (abs(adxbdy) + abs(bdxady)) * clift)
    errbound = ICC_ERRBOUND * permanent
    if det > errbound or -det > errbound:
        return float(det)
    return float(_incircle_exact(ax, ay, bx, by, cx, cy, dx, dy))


def _incircle_exact(ax, ay, bx, by, cx, cy, dx, dy) -> Fraction:
    ax, ay, bx, by, cx, cy, dx, dy = map(Fraction, (ax, ay, bx, by, cx, cy, dx, dy))
    adx, ady = ax - dx, ay - dy
    bdx, bdy = bx - dx, by - dy
    cdx, cdy = cx - dx, cy - dy
    alift = adx * adx + ady * ady
    blift = bdx * bdx + bdy * bdy
    clift = cdx * cdx + cdy * cdy
    return (alift * (bdx * cdy - cdx * bdy)
            + blift * (cdx * ady - adx * cdy)
            + clift * (adx * bdy - bdx * ady))


def circumradius_sq(ax: float, ay: float, bx: float, by: float,
                    cx: float, cy: float) -> float:
    """Squared circumradius, ``inf`` for collinear points."""
    if orient2d(ax, ay, bx, by, cx, cy) == 0.0:
        return float("inf")

    dx = bx - ax
    dy = by - ay
    ex = cx - ax
    ey = cy - ay
    bl = dx * dx + dy * dy
    cl = ex * ex + ey * ey
    denom = dx * ey - dy * ex
    if denom == 0.0:
        return float("inf")
    d = 0.5 / denom
    x = (ey * bl - dy * cl) * d
    y = (dx * cl - ex * bl) * d
    return x * x + y * y


def circumcenter(ax: float, ay: float, bx: float, by: float,
                 cx: float, cy: float) -> Tuple[float, float]:
    """Center of the circle through three non-collinear points."""
    dx = bx - ax
    dy = by - ay
    ex = cx - ax
    ey = cy - ay
    bl = dx * dx + dy * dy
    cl = ex * ex + ey * ey
    denom = dx * ey - dy * ex
    if denom == 0.0:
        raise ValueError("circumcenter of collinear points is undefined")
    d = 0.5 / denom
    return ax + (ey * bl - dy * cl) * d, ay + (dx * cl - ex * bl) * d


def polygon_area(vertices: np.ndarray) -> float:
    """Signed shoelace area, positive for counter-clockwise polygons."""
    if len(vertices) < 3:
        return 0.0
    x = vertices[:, 0]
    y = vertices[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def polygon_centroid(vertices: np.ndarray) -> np.ndarray:
    """Compute the area-weighted centroid of a simple polygon.

    Args:
        vertices: Array of [x, y] vertex coordinates

    Returns:
        [x, y] centroid coordinates
    """
    if len(vertices) < 3:
        return np.mean(vertices, axis=0)

    x = vertices[:, 0]
    y = vertices[:, 1]
    xn = np.roll(x, -1)
    yn = np.roll(y, -1)
    cross = x * yn - xn * y
    area = cross.sum()

    # Degenerate (zero area) polygons fall back to the vertex mean
    if abs(area) < 1e-12 * max(1.0, float(np.abs(vertices).max()) ** 2):
        return np.mean(vertices, axis=0)

    cx = float(np.dot(x + xn, cross)) / (3.0 * area)
    cy = float(np.dot(y + yn, cross)) / (3.0 * area)
    return np.array([cx, cy])


def clip_polygon(polygon: Sequence[Tuple[float, float]],
                 nx: float, ny: float, offset: float) -> List[Tuple[float, float]]:
    """
    Clip a convex polygon to the half-plane ``nx * x + ny * y <= offset``.

    Sutherland-Hodgman against a single edge; vertex order is preserved.
    """
    result: List[Tuple[float, float]] = []
    n = len(polygon)
    if n == 0:
        return result

    px, py = polygon[-1]
    pd = nx * px + ny * py - offset
    for qx, qy in polygon:
        qd = nx * qx + ny * qy - offset
        if qd <= 0.0:
            if pd > 0.0 and qd < 0.0:
                t = pd / (pd - qd)
                result.append((px + (qx - px) * t, py + (qy - py) * t))
            result.append((qx, qy))
        elif pd < 0.0:
            t = pd / (pd - qd)
            result.append((px + (qx - px) * t, py + (qy - py) * t))
        px, py, pd = qx, qy, qd
    return result
