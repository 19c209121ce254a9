from __future__ import annotations
import json
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from .backup import BackupReadError, PathLike, list_string_ids, read_string

FRAME_DATA = "frame_data"
UNKNOWN = "unknown"
PARSE_ERROR = "parse_error"
READ_ERROR = "read_error"


@dataclass
class StringSummary:
    id: str
    kind: str
    timestamp: Optional[datetime] = None
    data_size: int = 0
    frame_id: Optional[Any] = None
    label: Optional[str] = None
    shot_count: int = 0
    invalid_shot_count: int = 0
    distance: Optional[Any] = None
    distance_unit: Optional[str] = None
    target_size: Optional[str] = None
    active: Optional[bool] = None
    error: Optional[str] = None
    preview: Optional[str] = None

    @property
    def has_shots(self) -> bool:
        return self.shot_count > 0


def id_timestamp(str_id: str) -> Optional[datetime]:
    """String ids are the session's creation time in epoch milliseconds."""
    if not str_id.isdigit():
        return None
    try:
        return datetime.fromtimestamp(int(str_id) / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def summarize_document(str_id: str, data: Any, data_size: int = 0) -> StringSummary:
    s = StringSummary(id=str_id, kind=UNKNOWN, timestamp=id_timestamp(str_id), data_size=data_size)
    if not isinstance(data, dict):
        return s
    if data.get("id") is not None:
        s.kind = FRAME_DATA
    s.frame_id = data.get("id")
    s.label = data.get("label")
    s.shot_count = len(data.get("shots") or [])
    s.invalid_shot_count = len(data.get("shots_invalid") or [])
    s.distance = data.get("dist")
    s.distance_unit = data.get("dist_unit")
    if data.get("width") is not None or data.get("height") is not None:
        s.target_size = f"{data.get('width')}x{data.get('height')}"
    s.active = data.get("active")
    return s


def analyze_string_file(data_dir: PathLike, str_id: Union[str, int], preview_chars: int = 100) -> Optional[StringSummary]:
    """Summary of one session string; None when the file is missing."""
    sid = str(str_id)
    try:
        text = read_string(data_dir, sid)
    except BackupReadError as e:
        return StringSummary(id=sid, kind=READ_ERROR, timestamp=id_timestamp(sid), error=str(e))
    if text is None:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return StringSummary(id=sid, kind=PARSE_ERROR, timestamp=id_timestamp(sid),
                             data_size=len(text), error=str(e), preview=text[:preview_chars])
    return summarize_document(sid, data, len(text))


def explore_string_files(data_dir: PathLike) -> List[StringSummary]:
    out: List[StringSummary] = []
    for sid in list_string_ids(data_dir):
        s = analyze_string_file(data_dir, sid)
        if s is not None:
            out.append(s)
    return out


def group_by_kind(summaries: List[StringSummary]) -> Dict[str, List[StringSummary]]:
    groups: Dict[str, List[StringSummary]] = defaultdict(list)
    for s in summaries:
        groups[s.kind].append(s)
    return dict(groups)
