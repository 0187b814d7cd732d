"""Per-vehicle checkpoint progression shared by every vehicle on a track."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Sequence, Set, Tuple

from .errors import CheckpointIndexError, UnknownVehicleError
from .track import Checkpoint, validate_checkpoint_order

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class VehicleId:
    """Identity of one tracked vehicle.

    Kept distinct from plain integers so a vehicle id can never be passed
    where a checkpoint index is expected.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Vehicle id must wrap an int, got {self.value!r}")

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class VehicleProgress:
    """Progress of a single vehicle since its last reset."""

    next_expected_index: int = 0
    passed_indices: Set[int] = field(default_factory=set)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def clear(self) -> None:
        self.next_expected_index = 0
        self.passed_indices.clear()


@dataclass(frozen=True)
class CrossingResult:
    """Outcome of a vehicle crossing a checkpoint."""

    vehicle_id: VehicleId
    index: int
    accepted: bool
    completed_course: bool
    next_index: int


def _require_vehicle_id(vehicle_id: VehicleId) -> None:
    if not isinstance(vehicle_id, VehicleId):
        raise TypeError(f"Expected a VehicleId, got {type(vehicle_id).__name__} {vehicle_id!r}")


def _require_index(index: int) -> None:
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"Checkpoint index must be an int, got {index!r}")


class CheckpointTracker:
    """Authoritative record of what each vehicle has passed and must pass next.

    The tracker never initiates anything: the simulation layer reports
    crossings and reads back decisions. Vehicles progress independently, each
    guarded by its own lock, so crossings for different vehicles may be
    processed from different threads.

    Args:
        checkpoints: Ordered checkpoints, indexed ``0..N-1``. Fixed for the
            tracker's lifetime.
        vehicles: Vehicles to register up front.
    """

    def __init__(self, checkpoints: Sequence[Checkpoint], vehicles: Iterable[VehicleId] = ()) -> None:
        checkpoints = tuple(checkpoints)
        validate_checkpoint_order(checkpoints)
        self._checkpoints: Tuple[Checkpoint, ...] = checkpoints
        self._progress: Dict[VehicleId, VehicleProgress] = {}
        self._registry_lock = threading.Lock()
        logger.debug("Checkpoints loaded: %d", len(self._checkpoints))

        for vehicle_id in vehicles:
            self.register(vehicle_id)

    def __len__(self) -> int:
        return len(self._checkpoints)

    @property
    def checkpoints(self) -> Tuple[Checkpoint, ...]:
        return self._checkpoints

    @property
    def vehicles(self) -> List[VehicleId]:
        return sorted(self._progress)

    def _entry(self, vehicle_id: VehicleId) -> VehicleProgress:
        _require_vehicle_id(vehicle_id)
        try:
            return self._progress[vehicle_id]
        except KeyError:
            logger.debug("Vehicle %s not found", vehicle_id)
            raise UnknownVehicleError(vehicle_id) from None

    def _check_index(self, index: int, vehicle_id: VehicleId) -> None:
        if not 0 <= index < len(self._checkpoints):
            logger.error("Checkpoint index %s out of range for vehicle %s", index, vehicle_id)
            raise CheckpointIndexError(index, len(self._checkpoints), vehicle_id)

    # Registration and lifecycle

    def register(self, vehicle_id: VehicleId) -> None:
        """Start tracking ``vehicle_id``; existing progress is left untouched."""

        _require_vehicle_id(vehicle_id)
        with self._registry_lock:
            if vehicle_id not in self._progress:
                self._progress[vehicle_id] = VehicleProgress()
                logger.debug("Registered vehicle %s", vehicle_id)

    def is_registered(self, vehicle_id: VehicleId) -> bool:
        _require_vehicle_id(vehicle_id)
        return vehicle_id in self._progress

    def reset(self, vehicle_id: VehicleId) -> None:
        """Send the vehicle back to the first checkpoint and forget its passes."""

        entry = self._entry(vehicle_id)
        with entry.lock:
            entry.clear()
        logger.debug("Reset progress of vehicle %s", vehicle_id)

    # Queries

    def next_expected_index(self, vehicle_id: VehicleId) -> int:
        return self._entry(vehicle_id).next_expected_index

    def passed_indices(self, vehicle_id: VehicleId) -> FrozenSet[int]:
        entry = self._entry(vehicle_id)
        with entry.lock:
            return frozenset(entry.passed_indices)

    def get_next_checkpoint(self, vehicle_id: VehicleId) -> Checkpoint:
        """Return the checkpoint the vehicle has to cross next."""

        index = self._entry(vehicle_id).next_expected_index
        self._check_index(index, vehicle_id)
        return self._checkpoints[index]

    def can_pass(self, vehicle_id: VehicleId, index: int) -> bool:
        """Return whether crossing checkpoint ``index`` now is legal.

        A crossing is legal only for the next expected checkpoint and only if
        it has not already been credited since the last reset.
        """

        entry = self._entry(vehicle_id)
        _require_index(index)
        with entry.lock:
            return index == entry.next_expected_index and index not in entry.passed_indices

    def has_been_passed(self, vehicle_id: VehicleId, index: int) -> bool:
        _require_vehicle_id(vehicle_id)
        entry = self._progress.get(vehicle_id)
        if entry is None:
            return False
        with entry.lock:
            return index in entry.passed_indices

    def is_last_checkpoint(self, vehicle_id: VehicleId, index: int) -> bool:
        # The decision depends on the track alone; vehicle_id is accepted for symmetry.
        return index == len(self._checkpoints) - 1

    # Commands

    def mark_passed(self, vehicle_id: VehicleId, index: int) -> None:
        """Record checkpoint ``index`` as passed.

        Legality is not checked here; use :meth:`attempt_advance` unless
        :meth:`can_pass` has already been consulted.
        """

        entry = self._entry(vehicle_id)
        _require_index(index)
        self._check_index(index, vehicle_id)
        with entry.lock:
            entry.passed_indices.add(index)

    def advance(self, vehicle_id: VehicleId) -> None:
        """Move the vehicle on to the following checkpoint, wrapping after the last one.

        Advancing past a checkpoint that was never marked passed is allowed
        but logged as a warning, since it usually means the caller skipped
        :meth:`can_pass`.
        """

        entry = self._entry(vehicle_id)
        with entry.lock:
            current = entry.next_expected_index
            if current not in entry.passed_indices:
                logger.warning(
                    "Vehicle %s advanced past checkpoint %d without passing it", vehicle_id, current
                )
            entry.next_expected_index = (current + 1) % len(self._checkpoints)

    def attempt_advance(self, vehicle_id: VehicleId, index: int) -> CrossingResult:
        """Credit a crossing of checkpoint ``index`` if it is legal.

        Checking, recording and advancing happen under the vehicle's lock, so
        a duplicate crossing reported in the same step is rejected.
        """

        entry = self._entry(vehicle_id)
        with entry.lock:
            if not self.can_pass(vehicle_id, index):
                logger.debug(
                    "Vehicle %s rejected at checkpoint %s (expected %d)",
                    vehicle_id,
                    index,
                    entry.next_expected_index,
                )
                return CrossingResult(vehicle_id, index, False, False, entry.next_expected_index)

            self.mark_passed(vehicle_id, index)
            self.advance(vehicle_id)
            completed = self.is_last_checkpoint(vehicle_id, index)
            next_index = entry.next_expected_index

        if completed:
            logger.info("Vehicle %s completed the course", vehicle_id)
        else:
            logger.debug("Vehicle %s passed checkpoint %d", vehicle_id, index)
        return CrossingResult(vehicle_id, index, True, completed, next_index)

    def on_checkpoint_crossed(self, vehicle_id: VehicleId, index: int) -> CrossingResult:
        """Entry point for crossing events reported by the simulation layer."""

        return self.attempt_advance(vehicle_id, index)
