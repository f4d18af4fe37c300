"""Convex hull and polygon area - pure geometry operations."""

from __future__ import annotations

from typing import Sequence

from ..value_objects.geometry import Point


def cross(o: Point, a: Point, b: Point) -> float:
    """2D cross product of vectors OA and OB.
    
    Positive for a counter-clockwise turn, negative for clockwise,
    zero when the three points are collinear.
    """
    return (a.x - o.x) * (b.y - o.y) - (a.y - o.y) * (b.x - o.x)


def convex_hull(points: Sequence[Point]) -> list[Point]:
    """Compute the convex hull using Andrew's monotone chain.
    
    Algorithm:
        1. Sort points by x, then y
        2. Build the lower chain left to right
        3. Build the upper chain right to left
        4. Join both chains, dropping each chain's last point
           (it repeats the start of the other chain)
    
    Collinear points on the boundary are dropped. Fewer than 3 points
    are returned unchanged as a degenerate hull.
    
    Args:
        points: Input points (not modified)
    
    Returns:
        Hull vertices in counter-clockwise order (y axis up), without a
        repeated start point
    
    Complexity: O(n log n)
    """
    if len(points) < 3:
        return list(points)
    
    ordered = sorted(points, key=lambda p: (p.x, p.y))
    
    lower: list[Point] = []
    for p in ordered:
        while len(lower) >= 2 and cross(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)
    
    upper: list[Point] = []
    for p in reversed(ordered):
        while len(upper) >= 2 and cross(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)
    
    lower.pop()
    upper.pop()
    return lower + upper


def polygon_area(points: Sequence[Point]) -> float:
    """Calculate area using the shoelace formula.
    
    Works for clockwise and counter-clockwise orderings. A closing vertex
    equal to the first one contributes nothing, so open and closed rings
    give the same result.
    """
    n = len(points)
    if n < 3:
        return 0.0
    
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y
    return abs(area) / 2


def points_from_tuples(coords: Sequence[Sequence[float]]) -> list[Point]:
    """Convert [(x, y), ...] into Point objects."""
    return [Point(float(c[0]), float(c[1])) for c in coords]
