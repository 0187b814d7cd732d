"""Errors raised by the checkpoint progress tracker."""

from __future__ import annotations

from typing import Any, Optional


class TrackerError(Exception):
    """Base class for checkpoint tracker failures."""


class UnknownVehicleError(TrackerError, LookupError):
    """A vehicle was queried before being registered with the tracker."""

    def __init__(self, vehicle_id: Any) -> None:
        self.vehicle_id = vehicle_id
        super().__init__(f"Vehicle {vehicle_id} is not registered with the checkpoint tracker")


class CheckpointIndexError(TrackerError, IndexError):
    """A checkpoint index fell outside the track's checkpoint sequence."""

    def __init__(self, index: int, checkpoint_count: int, vehicle_id: Optional[Any] = None) -> None:
        self.index = index
        self.checkpoint_count = checkpoint_count
        self.vehicle_id = vehicle_id
        owner = f" for vehicle {vehicle_id}" if vehicle_id is not None else ""
        super().__init__(
            f"Checkpoint index {index}{owner} is out of range for a track with {checkpoint_count} checkpoints"
        )
