import pytest
import yaml

from racing_progress.layout import load_track, track_from_dict
from racing_progress.track import INDY_OVAL_TRACK


def _layout_of(track):
    return {
        "name": track.name,
        "width": track.width,
        "start_finish_index": track.start_finish_index,
        "centerline": [list(p.as_tuple()) for p in track.centerline],
        "checkpoints": [
            {
                "label": c.label,
                "segment": [list(c.segment.start.as_tuple()), list(c.segment.end.as_tuple())],
                "centerline_index": c.centerline_index,
            }
            for c in track.checkpoints
        ],
    }


def test_yaml_layout_matches_built_in_track(tmp_path):
    path = tmp_path / "indy.yaml"
    path.write_text(yaml.safe_dump(_layout_of(INDY_OVAL_TRACK)))

    track = load_track(path)

    assert track.name == "Indy Oval"
    assert track.checkpoints == INDY_OVAL_TRACK.checkpoints
    assert tuple(track.centerline) == INDY_OVAL_TRACK.centerline


def test_indices_follow_list_order():
    data = {"width": 1.0, "centerline": [], "checkpoints": [{"label": "a"}, {"label": "b"}]}
    track = track_from_dict(data, validate=False)
    assert [(c.index, c.label) for c in track.checkpoints] == [(0, "a"), (1, "b")]
    assert track.checkpoints[0].segment is None


def test_explicit_index_must_match_position():
    data = {"width": 1.0, "centerline": [], "checkpoints": [{"index": 1}, {"index": 0}]}
    with pytest.raises(ValueError, match="position"):
        track_from_dict(data, validate=False)


def test_missing_checkpoints_are_rejected():
    with pytest.raises(ValueError, match="checkpoints"):
        track_from_dict({"width": 1.0, "centerline": []})
    with pytest.raises(ValueError, match="empty"):
        track_from_dict({"width": 1.0, "centerline": [], "checkpoints": []}, validate=False)


def test_malformed_point_is_rejected():
    data = _layout_of(INDY_OVAL_TRACK)
    data["centerline"][3] = [1.0]
    with pytest.raises(ValueError, match="centerline point #3"):
        track_from_dict(data)


def test_invalid_geometry_is_rejected_on_load(tmp_path):
    data = _layout_of(INDY_OVAL_TRACK)
    data["width"] = 40.0
    path = tmp_path / "wide.yaml"
    path.write_text(yaml.safe_dump(data))
    with pytest.raises(ValueError, match="does not span"):
        load_track(path)


def test_empty_file_is_rejected(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    with pytest.raises(ValueError, match="empty"):
        load_track(path)
