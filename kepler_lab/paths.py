#!/usr/bin/env python3
"""
Bounded trajectory recorder.

A BodyPath keeps the recent positions of one body for two kinds of consumers:
- trail drawing, which reads the whole sequence every frame;
- swept-area computation (Kepler's second law), which walks consecutive pairs
  of points and accumulates the triangles they form with the focus.

The path is bounded twice: by a number of points and by the arclength the
points span. Whenever either bound is exceeded the oldest points are evicted
from the front and their segment length is subtracted from the tracked total.
"""
from collections import deque
from typing import Deque, Iterator, Tuple

from .constants import DEFAULT_PATH_DISTANCE_LIMIT, DEFAULT_PATH_LENGTH_LIMIT
from .vector_utils import Vec2, vec_cross, vec_dist, vec_sub

# Eviction never drops below a degenerate two-point polyline
MIN_PATH_POINTS = 2


def triangle_area(focus: Vec2, p1: Vec2, p2: Vec2) -> float:
    """Unsigned area of the triangle (focus, p1, p2)."""
    return 0.5 * abs(vec_cross(vec_sub(p1, focus), vec_sub(p2, focus)))


class BodyPath:
    """Insertion-ordered point history bounded by count and by arclength."""

    def __init__(self,
                 length_limit: int = DEFAULT_PATH_LENGTH_LIMIT,
                 distance_limit: float = DEFAULT_PATH_DISTANCE_LIMIT):
        self.points: Deque[Vec2] = deque()
        self.distance = 0.0
        self._length_limit = MIN_PATH_POINTS
        self._distance_limit = 0.0
        self.length_limit = length_limit
        self.distance_limit = distance_limit

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Vec2]:
        return iter(self.points)

    @property
    def length_limit(self) -> int:
        return self._length_limit

    @length_limit.setter
    def length_limit(self, value: int) -> None:
        value = int(value)
        if value < MIN_PATH_POINTS:
            raise ValueError(f"path length limit must be at least {MIN_PATH_POINTS}, got {value}")
        self._length_limit = value
        self._evict()

    @property
    def distance_limit(self) -> float:
        return self._distance_limit

    @distance_limit.setter
    def distance_limit(self, value: float) -> None:
        value = float(value)
        if not value > 0:
            raise ValueError(f"path distance limit must be positive, got {value}")
        self._distance_limit = value
        self._evict()

    @property
    def last(self):
        return self.points[-1] if self.points else None

    def add(self, point: Vec2) -> bool:
        """
        Append point unless it equals the last recorded one.

        Returns True when the point was recorded.
        """
        if self.points and self.points[-1] == point:
            return False

        if self.points:
            self.distance += vec_dist(self.points[-1], point)
        self.points.append(point)
        self._evict()
        return True

    def _evict(self) -> None:
        """Drop the oldest points while either limit is exceeded."""
        while len(self.points) > MIN_PATH_POINTS and (
            self.distance > self._distance_limit or len(self.points) > self._length_limit
        ):
            oldest = self.points.popleft()
            self.distance -= vec_dist(oldest, self.points[0])

        # Float cancellation can leave a tiny negative remainder
        if self.distance < 0.0:
            self.distance = 0.0

    def force_add(self, point: Vec2) -> None:
        """Append point even if it repeats the last one (used for the initial double point)."""
        if self.points:
            self.distance += vec_dist(self.points[-1], point)
        self.points.append(point)

    def clear(self) -> None:
        self.points.clear()
        self.distance = 0.0

    def segments(self) -> Iterator[Tuple[Vec2, Vec2]]:
        """Consecutive (older, newer) point pairs."""
        it = iter(self.points)
        prev = next(it, None)
        for point in it:
            yield prev, point
            prev = point

    def swept_area(self, focus: Vec2) -> float:
        """Area swept by the line from focus to the body along the recorded path."""
        return sum(triangle_area(focus, p1, p2) for p1, p2 in self.segments())
