"""Loading of authored track layouts from YAML."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Sequence, Union

import yaml

from .track import Checkpoint, LineSegment, Point, Track

logger = logging.getLogger(__name__)


def _point(raw: Any, where: str) -> Point:
    if not isinstance(raw, Sequence) or isinstance(raw, str) or len(raw) != 2:
        raise ValueError(f"{where}: expected an [x, y] pair, got {raw!r}")
    return Point(float(raw[0]), float(raw[1]))


def _checkpoint(position: int, raw: Mapping[str, Any]) -> Checkpoint:
    where = f"checkpoint #{position}"
    if not isinstance(raw, Mapping):
        raise ValueError(f"{where}: expected a mapping, got {raw!r}")

    index = raw.get("index", position)
    if index != position:
        raise ValueError(f"{where}: declared index {index} does not match its position in the layout")

    segment = None
    if raw.get("segment") is not None:
        ends = raw["segment"]
        if not isinstance(ends, Sequence) or len(ends) != 2:
            raise ValueError(f"{where}: segment needs exactly two end points")
        segment = LineSegment(_point(ends[0], where), _point(ends[1], where))

    centerline_index = raw.get("centerline_index")
    return Checkpoint(
        index=position,
        label=str(raw.get("label", "")),
        segment=segment,
        centerline_index=int(centerline_index) if centerline_index is not None else None,
    )


def track_from_dict(data: Mapping[str, Any], *, validate: bool = True) -> Track:
    """Build a :class:`Track` from a parsed layout mapping.

    Checkpoint indices follow the order of the ``checkpoints`` list.
    """

    if not isinstance(data, Mapping):
        raise ValueError("Track layout must be a mapping")
    for key in ("centerline", "width", "checkpoints"):
        if key not in data:
            raise ValueError(f"Track layout is missing '{key}'")

    track = Track(
        name=str(data.get("name", "Unnamed track")),
        centerline=tuple(_point(raw, f"centerline point #{i}") for i, raw in enumerate(data["centerline"])),
        width=float(data["width"]),
        checkpoints=tuple(_checkpoint(i, raw) for i, raw in enumerate(data["checkpoints"] or ())),
        start_finish_index=int(data.get("start_finish_index", 0)),
    )

    if validate:
        track.validate_geometry()
    else:
        track.validate_order()
    return track


def load_track(path: Union[str, Path], *, validate: bool = True) -> Track:
    """Read a track layout YAML file."""

    path = Path(path)
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    if data is None:
        raise ValueError(f"Track layout {path} is empty")

    track = track_from_dict(data, validate=validate)
    logger.info("Loaded track '%s' with %d checkpoints from %s", track.name, len(track.checkpoints), path)
    return track
