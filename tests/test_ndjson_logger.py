import json
from pathlib import Path

from shotmarker_backup.config import LoggingCfg
from shotmarker_backup.logs import NdjsonLogger


def _read_lines(path: Path):
    return [json.loads(l) for l in path.read_text(encoding="utf-8").splitlines() if l.strip()]


def test_records_are_stamped(tmp_path: Path):
    logger = NdjsonLogger(str(tmp_path / "logs"), "run")
    logger.write({"type": "info", "msg": "read_backup", "data": {"dir": "SM_backup_Aug_13"}})
    logger.write({"type": "info", "msg": "second"})
    logger.close()
    lines = _read_lines(logger.path)
    assert [l["seq"] for l in lines] == [1, 2]
    for l in lines:
        assert "hms" in l and l["schema"] == "v1"
        assert l["session_id"] == logger.session_id
    assert logger.path.name.startswith("run_") and logger.path.suffix == ".ndjson"


def test_regular_mode_drops_debug_unless_whitelisted(tmp_path: Path):
    logger = NdjsonLogger(str(tmp_path / "logs"), "run")
    logger.mode = "regular"
    logger.verbose_whitelist = {"keep_me"}
    logger.write({"type": "debug", "msg": "noisy"})
    logger.write({"type": "debug", "msg": "keep_me"})
    logger.write({"type": "error", "msg": "shot_decode_failed", "data": {"index": 0}})
    logger.close()
    msgs = [l["msg"] for l in _read_lines(logger.path)]
    assert msgs == ["keep_me", "shot_decode_failed"]


def test_verbose_mode_keeps_everything(tmp_path: Path):
    logger = NdjsonLogger(str(tmp_path / "logs"), "run")
    logger.mode = "verbose"
    logger.write({"type": "debug", "msg": "noisy"})
    logger.close()
    assert [l["msg"] for l in _read_lines(logger.path)] == ["noisy"]


def test_dual_file_writes(tmp_path: Path):
    base = tmp_path / "logs"
    logger = NdjsonLogger(str(base), "run", dual_file=True, debug_subdir="debug")
    logger.mode = "regular"
    logger.write({"type": "info", "msg": "op_info"})
    logger.write({"type": "debug", "msg": "op_debug"})
    logger.close()
    main_msgs = [l["msg"] for l in _read_lines(logger.path)]
    assert main_msgs == ["op_info"]
    assert logger.debug_path.parent == base / "debug"
    assert [l["msg"] for l in _read_lines(logger.debug_path)] == ["op_info", "op_debug"]


def test_from_config(tmp_path: Path):
    cfg = LoggingCfg(dir=str(tmp_path / "l"), file_prefix="cfg", mode="verbose",
                     verbose_whitelist=["x"], dual_file=True)
    logger = NdjsonLogger.from_config(cfg)
    logger.close()
    assert logger.mode == "verbose"
    assert "x" in logger.verbose_whitelist
    assert logger.debug_path is not None
