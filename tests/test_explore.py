from shotmarker_backup.explore import (FRAME_DATA, PARSE_ERROR, READ_ERROR, UNKNOWN, analyze_string_file,
                                       explore_string_files, group_by_kind, id_timestamp)


def test_analyze_frame_document(make_backup):
    doc = {"id": 7, "label": "Relay", "shots": ["a", "b"], "shots_invalid": ["c"],
           "dist": 300, "dist_unit": "m", "width": 1200, "height": 1200, "active": True}
    d = make_backup(strings={"1715436178223": doc})
    s = analyze_string_file(d, "1715436178223")
    assert s.kind == FRAME_DATA
    assert s.frame_id == 7 and s.label == "Relay"
    assert s.shot_count == 2 and s.invalid_shot_count == 1 and s.has_shots
    assert s.target_size == "1200x1200"
    assert s.distance == 300 and s.distance_unit == "m"
    assert s.timestamp.year == 2024


def test_analyze_errors(make_backup):
    d = make_backup(strings={"1": "not json", "2": [1, 2]})
    (d / "string-3.z").write_bytes(b"garbage")
    assert analyze_string_file(d, "1").kind == PARSE_ERROR
    assert analyze_string_file(d, "1").preview == "not json"
    assert analyze_string_file(d, "2").kind == UNKNOWN
    assert analyze_string_file(d, "3").kind == READ_ERROR
    assert analyze_string_file(d, "4") is None


def test_explore_sorted_and_grouped(make_backup):
    d = make_backup(strings={"20": {"id": 1}, "3": {"id": 2}, "100": "oops"})
    summaries = explore_string_files(d)
    assert [s.id for s in summaries] == ["3", "20", "100"]
    groups = group_by_kind(summaries)
    assert len(groups[FRAME_DATA]) == 2 and len(groups[PARSE_ERROR]) == 1


def test_id_timestamp():
    assert id_timestamp("abc") is None
    assert id_timestamp("0").year == 1970
