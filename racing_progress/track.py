"""Track layout primitives, ordered checkpoints and a pre-built Indianapolis-inspired oval."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

_EPSILON = 1e-10


@dataclass(frozen=True)
class Point:
    """2D coordinate."""

    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


def _cross(ax: float, ay: float, bx: float, by: float) -> float:
    return ax * by - ay * bx


@dataclass(frozen=True)
class LineSegment:
    """Straight line segment between two points."""

    start: Point
    end: Point

    def direction(self) -> Tuple[float, float]:
        dx = self.end.x - self.start.x
        dy = self.end.y - self.start.y
        length = math.hypot(dx, dy)
        if length == 0:
            raise ValueError("Line segment has zero length")
        return (dx / length, dy / length)

    def length(self) -> float:
        return math.hypot(self.end.x - self.start.x, self.end.y - self.start.y)

    def intersects(self, other: "LineSegment") -> bool:
        """Return ``True`` if the two segments share at least one point.

        Parallel (including collinear) segments are reported as not intersecting.
        """

        dx_a = self.end.x - self.start.x
        dy_a = self.end.y - self.start.y
        dx_b = other.end.x - other.start.x
        dy_b = other.end.y - other.start.y

        denom = _cross(dx_a, dy_a, dx_b, dy_b)
        if abs(denom) < _EPSILON:
            return False

        dx_ab = other.start.x - self.start.x
        dy_ab = other.start.y - self.start.y
        t = _cross(dx_ab, dy_ab, dx_b, dy_b) / denom
        u = _cross(dx_ab, dy_ab, dx_a, dy_a) / denom
        return 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0


@dataclass(frozen=True)
class Checkpoint:
    """Ordered waypoint on the track.

    ``index`` is the checkpoint's position in the track sequence and never
    changes once the checkpoint is placed. The remaining fields describe the
    gate for display and crossing detection; the progress tracker only reads
    ``index``.
    """

    index: int
    label: str = ""
    segment: Optional[LineSegment] = None
    centerline_index: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.index, bool) or not isinstance(self.index, int):
            raise TypeError(f"Checkpoint index must be an int, got {self.index!r}")
        if self.index < 0:
            raise ValueError(f"Checkpoint index must be non-negative, got {self.index}")

    @property
    def name(self) -> str:
        return self.label or f"Checkpoint {self.index}"

    def is_crossed_by(self, start: Point, end: Point) -> bool:
        """Return whether a movement from ``start`` to ``end`` crosses the gate."""

        if self.segment is None:
            return False
        return self.segment.intersects(LineSegment(start, end))


def validate_checkpoint_order(checkpoints: Sequence[Checkpoint]) -> None:
    """Ensure checkpoints are indexed ``0..N-1`` in sequence order."""

    if not checkpoints:
        raise ValueError("Checkpoint sequence is empty")
    for position, checkpoint in enumerate(checkpoints):
        if checkpoint.index != position:
            raise ValueError(
                f"{checkpoint.name} has index {checkpoint.index} but sits at position {position}"
            )


@dataclass(frozen=True)
class Track:
    """Representation of a closed race track.

    The last checkpoint in ``checkpoints`` is the finish line.
    """

    name: str
    centerline: Sequence[Point]
    width: float
    checkpoints: Sequence[Checkpoint]
    start_finish_index: int

    @property
    def finish_line(self) -> Checkpoint:
        return self.checkpoints[-1]

    def _wrapped_index(self, index: int) -> int:
        return index % len(self.centerline)

    def _centerline_vector(self, index: int) -> Tuple[float, float]:
        prev_point = self.centerline[self._wrapped_index(index - 1)]
        next_point = self.centerline[self._wrapped_index(index + 1)]
        dx = next_point.x - prev_point.x
        dy = next_point.y - prev_point.y
        length = math.hypot(dx, dy)
        if length == 0:
            raise ValueError(f"Degenerate centreline segment around index {index}")
        return (dx / length, dy / length)

    def tangent(self, index: int) -> Tuple[float, float]:
        """Return the unit tangent vector along the centreline."""

        return self._centerline_vector(index)

    def _segment_normal(self, index: int) -> Tuple[float, float]:
        tangent = self._centerline_vector(index)
        # Rotate tangent by 90 degrees clockwise to obtain an outward normal.
        return (tangent[1], -tangent[0])

    def normals(self) -> List[Tuple[float, float]]:
        """Return outward normals along the centreline for visualisation."""

        return [self._segment_normal(i) for i in range(len(self.centerline))]

    def validate_order(self) -> None:
        validate_checkpoint_order(self.checkpoints)

    def validate_geometry(
        self,
        *,
        perpendicular_tolerance: float = 0.12,
        length_tolerance: float = 1e-3,
    ) -> None:
        """Validate checkpoint order, perpendicular gates and spanning width."""

        self.validate_order()
        if len(self.centerline) < 3:
            raise ValueError("Centreline needs at least three points")

        for checkpoint in self.checkpoints:
            if checkpoint.segment is None or checkpoint.centerline_index is None:
                raise ValueError(f"{checkpoint.name} has no gate placed on the centreline")

            tangent = self._centerline_vector(checkpoint.centerline_index)
            seg_dir = checkpoint.segment.direction()
            dot = tangent[0] * seg_dir[0] + tangent[1] * seg_dir[1]
            if abs(dot) > perpendicular_tolerance:
                raise ValueError(f"{checkpoint.name} is not perpendicular to track tangent (dot={dot})")
            if checkpoint.segment.length() + length_tolerance < self.width:
                raise ValueError(f"{checkpoint.name} does not span the track width")

        if self.finish_line.centerline_index != self.start_finish_index:
            raise ValueError("Last checkpoint must sit on the start/finish line")


def _gate_across_x(x: float, y: float, width: float) -> LineSegment:
    return LineSegment(Point(x - width / 2, y), Point(x + width / 2, y))


def _gate_across_y(x: float, y: float, width: float) -> LineSegment:
    return LineSegment(Point(x, y - width / 2), Point(x, y + width / 2))


# Indianapolis-inspired oval track definition, driven clockwise from the start line.
_CENTERLINE: Tuple[Point, ...] = (
    Point(70.0, -45.0),
    Point(35.0, -45.0),
    Point(0.0, -45.0),
    Point(-35.0, -45.0),
    Point(-70.0, -45.0),
    Point(-75.0, -25.0),
    Point(-75.0, 0.0),
    Point(-75.0, 25.0),
    Point(-70.0, 45.0),
    Point(-35.0, 45.0),
    Point(0.0, 45.0),
    Point(35.0, 45.0),
    Point(70.0, 45.0),
    Point(75.0, 25.0),
    Point(75.0, 0.0),
    Point(75.0, -25.0),
)

_TRACK_WIDTH = 18.0

_CHECKPOINTS: Tuple[Checkpoint, ...] = (
    Checkpoint(0, "Turn 1", _gate_across_x(-75.0, -25.0, _TRACK_WIDTH), 5),
    Checkpoint(1, "North Short Chute", _gate_across_x(-75.0, 0.0, _TRACK_WIDTH), 6),
    Checkpoint(2, "Backstretch", _gate_across_y(0.0, 45.0, _TRACK_WIDTH), 10),
    Checkpoint(3, "Turn 3", _gate_across_x(75.0, 25.0, _TRACK_WIDTH), 13),
    Checkpoint(4, "South Short Chute", _gate_across_x(75.0, 0.0, _TRACK_WIDTH), 14),
    Checkpoint(5, "Start/Finish", _gate_across_y(0.0, -45.0, _TRACK_WIDTH), 2),
)

INDY_OVAL_TRACK = Track(
    name="Indy Oval",
    centerline=_CENTERLINE,
    width=_TRACK_WIDTH,
    checkpoints=_CHECKPOINTS,
    start_finish_index=2,
)

# Validate geometry eagerly so incorrect edits are caught during import.
INDY_OVAL_TRACK.validate_geometry()
