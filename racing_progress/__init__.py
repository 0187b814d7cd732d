"""Checkpoint progression tracking for multi-vehicle racing environments."""

from .errors import CheckpointIndexError, TrackerError, UnknownVehicleError
from .layout import load_track, track_from_dict
from .track import INDY_OVAL_TRACK, Checkpoint, LineSegment, Point, Track
from .tracker import CheckpointTracker, CrossingResult, VehicleId, VehicleProgress

__all__ = [
    "INDY_OVAL_TRACK",
    "Track",
    "Point",
    "LineSegment",
    "Checkpoint",
    "CheckpointTracker",
    "CrossingResult",
    "VehicleId",
    "VehicleProgress",
    "TrackerError",
    "UnknownVehicleError",
    "CheckpointIndexError",
    "load_track",
    "track_from_dict",
]
