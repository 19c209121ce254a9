import os
import zlib

import pytest

from shotmarker_backup.backup import (BackupNotFoundError, BackupReadError, decode_frame_shots,
                                      find_data_directory, frames_with_shots, list_backup_directories,
                                      list_string_ids, read_archive_data, read_main_data, read_string,
                                      read_string_json)
from shotmarker_backup.codec.shotpack import encode_shot

from conftest import write_string_file


def test_find_explicit_directory(make_backup):
    d = make_backup()
    assert find_data_directory(d) == d


def test_find_explicit_directory_missing(tmp_path):
    with pytest.raises(BackupNotFoundError):
        find_data_directory(tmp_path / "nope")


def test_find_most_recent_backup(tmp_path, make_backup):
    old = make_backup("SM_backup_May_16")
    new = make_backup("SM_backup_Aug_13")
    os.utime(old, (1000, 1000))
    os.utime(new, (2000, 2000))
    (tmp_path / "other_dir").mkdir()
    assert list_backup_directories(tmp_path) == [new, old]
    assert find_data_directory(root=tmp_path) == new


def test_find_falls_back_to_root(tmp_path):
    (tmp_path / "data.txt").write_text("{}", encoding="utf-8")
    assert find_data_directory(root=tmp_path) == tmp_path


def test_find_nothing(tmp_path):
    with pytest.raises(BackupNotFoundError):
        find_data_directory(root=tmp_path)


def test_read_main_and_archive(make_backup):
    d = make_backup(data={"version": 3, "frames": {}}, archive={"1": {"name": "Bob"}})
    assert read_main_data(d)["version"] == 3
    assert read_archive_data(d) == {"1": {"name": "Bob"}}


def test_archive_missing_is_empty(make_backup):
    assert read_archive_data(make_backup()) == {}


def test_bad_main_json(make_backup):
    d = make_backup()
    (d / "data.txt").write_text("{nope", encoding="utf-8")
    with pytest.raises(BackupReadError):
        read_main_data(d)


def test_string_files(make_backup):
    d = make_backup(strings={"1715436178223": {"id": 4}, "99": "plain text"})
    (d / "notes.z").write_bytes(b"")
    assert list_string_ids(d) == ["99", "1715436178223"]
    assert read_string(d, 99) == "plain text"
    assert read_string_json(d, "1715436178223") == {"id": 4}
    assert read_string(d, "12345") is None


def test_corrupt_string_file(make_backup):
    d = make_backup()
    (d / "string-5.z").write_bytes(b"not zlib at all")
    with pytest.raises(BackupReadError):
        read_string(d, "5")
    write_string_file(d, "6", "{broken")
    with pytest.raises(BackupReadError):
        read_string_json(d, "6")


def test_decode_frame_skips_bad_shots():
    good = encode_shot({"ts": 1, "x": 1.5, "y": -2.0, "v": 800})
    frame = {
        "id": "F1",
        "label": "Relay 1",
        "shots": [good, "!!!!", {"ts": 2, "x": 3.0, "sighter": True}, "AQID", 17],
        "shots_invalid": [encode_shot({"ts": 3, "error": 4})],
    }
    dec = decode_frame_shots(frame)
    assert dec.frame_id == "F1" and dec.label == "Relay 1"
    assert [s.ts for s in dec.shots] == [1, 2]
    assert dec.shots[0].x == 1.5
    assert [s.error for s in dec.invalid] == [4]
    assert [f.index for f in dec.failures] == [1, 3, 4]
    rec = dec.failures[0].to_record(frame="F1")
    assert rec["type"] == "error" and rec["msg"] == "shot_decode_failed"
    assert rec["data"]["frame"] == "F1"


def test_frames_with_shots():
    data = {"frames": {"1": {"shots": ["x"]}, "2": {"shots": []}, "3": {"shots_invalid": ["y"]}, "4": {}}}
    assert [fid for fid, _ in frames_with_shots(data)] == ["1", "3"]
    assert frames_with_shots({}) == []
