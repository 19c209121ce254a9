from __future__ import annotations
import logging, math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from .backup import (ARCHIVE_FILE, BackupError, PathLike, ShotFailure, decode_shot_entry,
                     list_string_ids, read_archive_data, read_string_json)
from .codec.errors import ShotCodecError
from .config import ReportCfg
from .logs import NdjsonLogger

log = logging.getLogger(__name__)

# Archive entries use this placeholder when no shooter was entered
PLACEHOLDER_NAME = "A"
UNKNOWN_SHOOTER = "Unknown Shooter"


@dataclass
class MatchRecord:
    session_id: str
    match: str
    shots: str
    user: str
    timestamp: Optional[datetime]
    distance: Any = None
    target_face: Any = None
    group_text: Any = None
    shot_data: List[Dict[str, Any]] = field(default_factory=list)
    failures: List[ShotFailure] = field(default_factory=list)

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "match": self.match,
            "shots": self.shots,
            "user": self.user,
            "timestamp": self.timestamp.isoformat().replace("+00:00", "Z") if self.timestamp else None,
            "distance": self.distance,
            "target_face": self.target_face,
            "group_text": self.group_text,
            "shot_data": self.shot_data,
        }


@dataclass
class MatchExtraction:
    matches: List[MatchRecord] = field(default_factory=list)
    processed: int = 0
    skipped: int = 0
    failed_shots: int = 0


def round_half_up(value: Optional[float], ndigits: int = 0) -> Optional[float]:
    if value is None:
        return None
    scale = 10 ** ndigits
    r = math.floor(value * scale + 0.5) / scale
    return int(r) if ndigits == 0 else r


def ms_to_datetime(ts: Any) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(float(ts) / 1000.0, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def shot_string(shots: List[Dict[str, Any]]) -> str:
    """Comma-joined recorded score text of the non-sighter shots."""
    out = []
    for s in shots:
        if s.get("sighter"):
            continue
        score = s.get("score")
        out.append("0" if score is None else str(score))
    return ",".join(out)


def shot_tags(shot: Dict[str, Any]) -> str:
    tags = []
    if shot.get("fake"):
        tags.append("inserted")
    elif shot.get("score_override"):
        tags.append("modified")
    if shot.get("off"):
        tags.append("off")
    if shot.get("hide"):
        tags.append("hidden")
    if shot.get("sighter"):
        tags.append("sighter")
    if shot.get("simulated"):
        tags.append("simulated")
    if shot.get("warning"):
        tags.append(f"warning-{shot['warning']}")
    # fewer than 4 sensors timed the shot
    if not shot.get("fake") and shot.get("v_count") != 4:
        tags.append("incomplete")
    return "/".join(tags)


def shooter_name(entry: Dict[str, Any]) -> str:
    name = entry.get("name")
    if name and name != PLACEHOLDER_NAME:
        return str(name)
    return UNKNOWN_SHOOTER


def _num(v: Any) -> Optional[float]:
    if isinstance(v, bool) or v is None:
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def shot_row(shot: Dict[str, Any], session: Dict[str, Any], target_face: Any, report: ReportCfg) -> Dict[str, Any]:
    """Reporting view of one shot: calibrated position, velocity in report units."""
    x, y, v = _num(shot.get("x")), _num(shot.get("y")), _num(shot.get("v"))
    theta, phi = _num(shot.get("theta")), _num(shot.get("phi"))
    cal_x = _num(session.get("cal_x")) or 0.0
    cal_y = _num(session.get("cal_y")) or 0.0
    return {
        "x": round_half_up(None if x is None else x + cal_x),
        "y": round_half_up(None if y is None else y + cal_y),
        "score": shot.get("score"),
        "sighter": shot.get("sighter") is True,
        "velocity": round_half_up(None if v is None else v * report.velocity_factor),
        "yaw": round_half_up(None if theta is None else theta * report.angle_factor, 1),
        "pitch": round_half_up(None if phi is None else phi * report.angle_factor, 1),
        "target_face": target_face,
        "tags": shot_tags(shot),
        "quality": round_half_up(_num(shot.get("err_v")), 1) if shot.get("v_count") == 4 else None,
    }


def decode_session_shots(session: Dict[str, Any]) -> Tuple[List[Dict[str, Any]], List[ShotFailure]]:
    """Decode a session's shots and attach display_text/score from score_string.

    score_string holds one "display:score" pair per shot, by index.
    """
    score_string = session.get("score_string")
    score_info = str(score_string).split(",") if score_string else []
    shots: List[Dict[str, Any]] = []
    failures: List[ShotFailure] = []
    for j, entry in enumerate(session.get("shots") or []):
        if isinstance(entry, dict):
            shot = dict(entry)
        else:
            try:
                shot = decode_shot_entry(entry).to_dict()
            except (ShotCodecError, TypeError, ValueError) as e:
                failures.append(ShotFailure(index=j, raw=entry, error=str(e)))
                continue
        if j < len(score_info) and score_info[j]:
            parts = score_info[j].split(":")
            shot["display_text"] = parts[0]
            if len(parts) > 1:
                shot["score"] = parts[1]
        shots.append(shot)
    return shots, failures


def extract_match_data(data_dir: PathLike, str_id: str, archive: Dict[str, Any],
                       report: Optional[ReportCfg] = None,
                       logger: Optional[NdjsonLogger] = None) -> Optional[MatchRecord]:
    """Build the match record for one session, or None if it has no scoring shots."""
    report = report or ReportCfg()
    session = read_string_json(data_dir, str_id)
    if not isinstance(session, dict) or not session.get("shots"):
        return None
    entry = archive.get(str_id)
    if not isinstance(entry, dict):
        log.info("no archive entry for %s", str_id)
        return None

    shots, failures = decode_session_shots(session)
    for f in failures:
        log.warning("session %s: shot %d failed to decode: %s", str_id, f.index + 1, f.error)
        if logger:
            logger.write(f.to_record(session=str_id))

    if not any(not s.get("sighter") for s in shots):
        return None

    target_face = entry.get("face_id")
    return MatchRecord(
        session_id=str_id,
        match=str(entry.get("target_name") or f"Match {session.get('id')}"),
        shots=shot_string(shots),
        user=shooter_name(entry),
        timestamp=ms_to_datetime(entry.get("ts")),
        distance=entry.get("distance"),
        target_face=target_face,
        group_text=entry.get("group"),
        shot_data=[shot_row(s, session, target_face, report) for s in shots],
        failures=failures,
    )


def extract_all_matches(data_dir: PathLike, report: Optional[ReportCfg] = None,
                        logger: Optional[NdjsonLogger] = None,
                        archive_file: str = ARCHIVE_FILE) -> MatchExtraction:
    """Match records for every archived session, oldest first.

    A session that cannot be read is logged and skipped.
    """
    archive = read_archive_data(data_dir, archive_file)
    available = set(list_string_ids(data_dir))
    result = MatchExtraction()
    # newest archive entries first, like the device's own CSV export
    for sid in reversed(list(archive.keys())):
        if sid not in available:
            result.skipped += 1
            continue
        try:
            m = extract_match_data(data_dir, sid, archive, report, logger)
        except BackupError as e:
            log.warning("skipping session %s: %s", sid, e)
            if logger:
                logger.write({"type": "error", "msg": "session_read_failed", "data": {"session": sid, "error": str(e)}})
            result.skipped += 1
            continue
        if m is None:
            result.skipped += 1
            continue
        result.matches.append(m)
        result.processed += 1
        result.failed_shots += len(m.failures)

    epoch = datetime.fromtimestamp(0, tz=timezone.utc)
    result.matches.sort(key=lambda m: m.timestamp or epoch)
    if logger:
        logger.write({"type": "info", "msg": "matches_extracted", "data": {
            "processed": result.processed, "skipped": result.skipped, "failed_shots": result.failed_shots}})
    return result
