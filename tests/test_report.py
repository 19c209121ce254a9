from datetime import datetime, timezone

from shotmarker_backup.codec.shotpack import Shot
from shotmarker_backup.config import ReportCfg
from shotmarker_backup.explore import FRAME_DATA, PARSE_ERROR, StringSummary
from shotmarker_backup.matches import MatchRecord
from shotmarker_backup.report import format_shot, format_string_summary, summary_lines


def test_format_shot():
    s = Shot(ts=1700000000000, x=12.345, y=-6.7, v=100.0, temp=21, error=3)
    line = format_shot(1, s, ReportCfg(velocity_factor=2.0))
    assert "Shot 1:" in line and "2023-11-14" in line
    assert "pos=(12.35, -6.70)" in line or "pos=(12.34, -6.70)" in line
    assert "v=200.0 fps" in line and "temp=21C" in line and "error=3" in line
    assert "Invalid shot 2" in format_shot(2, s, invalid=True)


def test_format_string_summary():
    assert "Frame 4" in format_string_summary(StringSummary(id="1", kind=FRAME_DATA, frame_id=4, shot_count=2))
    assert "parse_error - boom" in format_string_summary(StringSummary(id="1", kind=PARSE_ERROR, error="boom"))


def test_summary_lines_limit():
    ms = [MatchRecord(session_id=str(i), match=f"M{i}", shots="5,5", user="U",
                      timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc)) for i in range(12)]
    lines = summary_lines(ms)
    assert len(lines) == 11
    assert lines[0] == "  1. M0 (2 shots) - U [None]"
    assert lines[-1] == "  ... and 2 more matches"
