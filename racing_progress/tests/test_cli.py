import logging

import pytest
import yaml

from racing_progress.cli import main, replay, run, setup_logger
from racing_progress.track import Checkpoint
from racing_progress.tracker import CheckpointTracker, VehicleId


def _write_config(tmp_path, **config):
    path = tmp_path / "replay.yaml"
    path.write_text(yaml.safe_dump(config))
    return path


@pytest.fixture(autouse=True)
def _restore_package_logger():
    package_logger = logging.getLogger("racing_progress")
    level = package_logger.level
    yield
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(level)


def test_replay_counts_rejections_and_completions():
    tracker = CheckpointTracker([Checkpoint(i) for i in range(3)], [VehicleId(1), VehicleId(2)])
    crossings = [(1, 0), (1, 0), (1, 1), (2, 1), (1, 2), (1, 0), (7, 0)]

    summary = replay(tracker, crossings)

    first = summary.vehicles[VehicleId(1)]
    assert (first.accepted, first.rejected, first.completions) == (4, 1, 1)
    assert first.next_index == 1
    assert first.passed == (0,)
    second = summary.vehicles[VehicleId(2)]
    assert (second.accepted, second.rejected) == (0, 1)
    assert summary.unknown == 1


def test_replay_without_reset_stops_after_lap():
    tracker = CheckpointTracker([Checkpoint(i) for i in range(2)], [VehicleId(1)])

    summary = replay(tracker, [(1, 0), (1, 1), (1, 0)], reset_on_completion=False)

    stats = summary.vehicles[VehicleId(1)]
    assert stats.completions == 1
    assert stats.rejected == 1
    assert stats.next_index == 0
    assert stats.passed == (0, 1)


def test_run_uses_built_in_track_by_default(tmp_path):
    summary = run({"vehicles": [0], "crossings": [[0, 0], [0, 1]]}, tmp_path)
    assert summary.vehicles[VehicleId(0)].accepted == 2
    assert summary.vehicles[VehicleId(0)].next_index == 2


def test_run_validates_track_relative_to_config(tmp_path):
    (tmp_path / "loop.yaml").write_text(
        yaml.safe_dump({"width": 1.0, "centerline": [], "checkpoints": [{"label": "a"}, {"label": "b"}]})
    )
    with pytest.raises(ValueError, match="Centreline"):
        run({"track": "loop.yaml", "vehicles": [0]}, tmp_path)


def test_main_replays_configuration(tmp_path, caplog):
    log_file = tmp_path / "replay.log"
    conf = _write_config(
        tmp_path,
        vehicles=[3],
        crossings=[[3, 0], [3, 4]],
        logger={"level": "debug", "file": str(log_file)},
    )

    with caplog.at_level(logging.INFO, logger="racing_progress"):
        assert main(["--conf", str(conf)]) == 0

    assert "vehicle 3: accepted=1 rejected=1" in caplog.text
    assert "accepted=1 rejected=1" in log_file.read_text()


def test_setup_logger_replaces_handlers(tmp_path):
    setup_logger("INFO")
    package_logger = setup_logger("WARNING", log_file=tmp_path / "out.log")
    assert package_logger.level == logging.WARNING
    assert len(package_logger.handlers) == 2


def test_setup_logger_accepts_numeric_level():
    package_logger = setup_logger(10)
    assert package_logger.level == logging.DEBUG


def test_main_accepts_numeric_level_in_config(tmp_path):
    conf = _write_config(tmp_path, vehicles=[0], crossings=[[0, 0]], logger={"level": 20})
    assert main(["--conf", str(conf)]) == 0
    assert logging.getLogger("racing_progress").level == logging.INFO
