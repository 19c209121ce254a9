from __future__ import annotations
from typing import List, Optional

from .codec.shotpack import Shot
from .config import ReportCfg
from .explore import FRAME_DATA, StringSummary
from .matches import MatchRecord, ms_to_datetime


def _fmt(v: Optional[float], nd: int) -> str:
    return "?" if v is None else f"{v:.{nd}f}"


def format_shot(index: int, shot: Shot, report: Optional[ReportCfg] = None, invalid: bool = False) -> str:
    """One console line per decoded shot; velocity shown in report units."""
    report = report or ReportCfg()
    when = ms_to_datetime(shot.ts)
    label = "Invalid shot" if invalid else "Shot"
    line = (f"  {label} {index}: {when.isoformat() if when else shot.ts} "
            f"pos=({_fmt(shot.x, 2)}, {_fmt(shot.y, 2)}) "
            f"v={_fmt(shot.v * report.velocity_factor, 1)} fps temp={shot.temp}C")
    if shot.multi_assign:
        line += f" multi_assign={shot.multi_assign}"
    if shot.error:
        line += f" error={shot.error}"
    return line


def format_string_summary(s: StringSummary) -> str:
    if s.kind == FRAME_DATA:
        return (f"  {s.id}: Frame {s.frame_id} \"{s.label or ''}\" - "
                f"{s.shot_count} shots, {s.invalid_shot_count} invalid")
    if s.error:
        return f"  {s.id}: {s.kind} - {s.error}"
    return f"  {s.id}: {s.kind} - {s.data_size} bytes"


def format_match_line(i: int, m: MatchRecord) -> str:
    n = len(m.shots.split(",")) if m.shots else 0
    return f"  {i}. {m.match} ({n} shots) - {m.user} [{m.group_text}]"


def summary_lines(matches: List[MatchRecord], limit: int = 10) -> List[str]:
    lines = [format_match_line(i, m) for i, m in enumerate(matches[:limit], start=1)]
    if len(matches) > limit:
        lines.append(f"  ... and {len(matches) - limit} more matches")
    return lines
