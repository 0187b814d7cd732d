"""Command line entry point replaying checkpoint crossings against a track."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import yaml

from .errors import UnknownVehicleError
from .layout import load_track
from .track import INDY_OVAL_TRACK, Track
from .tracker import CheckpointTracker, VehicleId

logger = logging.getLogger(__name__)

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(level: Union[str, int] = "INFO", fmt: str = DEFAULT_LOG_FORMAT, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the package logger with a console and an optional file handler."""

    package_logger = logging.getLogger("racing_progress")
    package_logger.setLevel(level if isinstance(level, int) else str(level).upper())
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
    return package_logger


def parse_config(path: Union[str, Path]) -> Dict[str, Any]:
    with open(path, "r") as f:
        config = yaml.safe_load(f) or {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration {path} must be a mapping")
    return config


def resolve_track(config: Dict[str, Any], base_dir: Path) -> Track:
    track_path = config.get("track")
    if track_path is None:
        logger.info("No track configured, using %s", INDY_OVAL_TRACK.name)
        return INDY_OVAL_TRACK
    path = Path(track_path)
    if not path.is_absolute():
        path = base_dir / path
    return load_track(path)


@dataclass
class VehicleSummary:
    """Replay statistics for one vehicle."""

    accepted: int = 0
    rejected: int = 0
    completions: int = 0
    next_index: int = 0
    passed: Tuple[int, ...] = field(default_factory=tuple)


@dataclass
class ReplaySummary:
    vehicles: Dict[VehicleId, VehicleSummary] = field(default_factory=dict)
    unknown: int = 0


def replay(
    tracker: CheckpointTracker,
    crossings: Iterable[Sequence[int]],
    *,
    reset_on_completion: bool = True,
) -> ReplaySummary:
    """Feed ``(vehicle, checkpoint)`` crossings into ``tracker``.

    With ``reset_on_completion`` a vehicle starts a fresh episode as soon as
    it completes the course. Crossings by unregistered vehicles are counted
    and skipped.
    """

    summary = ReplaySummary({vehicle_id: VehicleSummary() for vehicle_id in tracker.vehicles})
    for raw_vehicle, index in crossings:
        vehicle_id = VehicleId(int(raw_vehicle))
        try:
            result = tracker.on_checkpoint_crossed(vehicle_id, int(index))
        except UnknownVehicleError:
            summary.unknown += 1
            continue

        stats = summary.vehicles.setdefault(vehicle_id, VehicleSummary())
        if not result.accepted:
            stats.rejected += 1
            continue
        stats.accepted += 1
        if result.completed_course:
            stats.completions += 1
            if reset_on_completion:
                tracker.reset(vehicle_id)

    for vehicle_id, stats in summary.vehicles.items():
        stats.next_index = tracker.next_expected_index(vehicle_id)
        stats.passed = tuple(sorted(tracker.passed_indices(vehicle_id)))
    return summary


def _log_summary(track: Track, summary: ReplaySummary) -> None:
    logger.info("===== Summary for %s =====", track.name)
    for vehicle_id, stats in sorted(summary.vehicles.items()):
        logger.info(
            "vehicle %s: accepted=%d rejected=%d completions=%d next=%d passed=%s",
            vehicle_id,
            stats.accepted,
            stats.rejected,
            stats.completions,
            stats.next_index,
            list(stats.passed),
        )
    if summary.unknown:
        logger.warning("%d crossings came from unregistered vehicles", summary.unknown)
    logger.info("===== End of summary =====")


def run(config: Dict[str, Any], base_dir: Path) -> ReplaySummary:
    track = resolve_track(config, base_dir)
    vehicles = [VehicleId(int(v)) for v in config.get("vehicles") or ()]
    tracker = CheckpointTracker(track.checkpoints, vehicles)
    logger.info("Tracking %d vehicles over %d checkpoints", len(vehicles), len(tracker))

    summary = replay(
        tracker,
        config.get("crossings") or (),
        reset_on_completion=bool(config.get("reset_on_completion", True)),
    )
    _log_summary(track, summary)
    return summary


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--conf",
        type=str,
        metavar="PATH_TO_CONF_FILE",
        required=True,
        help="relative or absolute path to the configuration file",
    )
    args = parser.parse_args(argv)

    configuration_file = Path(args.conf)
    configuration = parse_config(configuration_file)

    logger_config = configuration.get("logger") or {}
    log_file = logger_config.get("file")
    setup_logger(
        logger_config.get("level", "INFO"),
        logger_config.get("format", DEFAULT_LOG_FORMAT),
        Path(log_file) if log_file else None,
    )
    logger.info("Replaying crossings using configuration %s", configuration_file)

    run(configuration, configuration_file.resolve().parent)
    return 0
