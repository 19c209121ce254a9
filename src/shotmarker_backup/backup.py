from __future__ import annotations
import json, logging, zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .codec.errors import ShotCodecError
from .codec.shotpack import Shot, decode_shot, shot_from_dict

log = logging.getLogger(__name__)

DIR_PREFIX = "SM_backup_"
DATA_FILE = "data.txt"
ARCHIVE_FILE = "archive.txt"
# Per-session documents: string-<ms timestamp>.z, zlib-compressed JSON
STRING_PREFIX = "string-"
STRING_SUFFIX = ".z"

PathLike = Union[str, Path]


class BackupError(Exception):
    pass


class BackupNotFoundError(BackupError):
    pass


class BackupReadError(BackupError):
    pass


def list_backup_directories(root: PathLike = ".", prefix: str = DIR_PREFIX, data_file: str = DATA_FILE) -> List[Path]:
    """Extracted backup folders under root, most recently modified first."""
    base = Path(root)
    if not base.is_dir():
        return []
    dirs = [p for p in base.iterdir()
            if p.is_dir() and p.name.startswith(prefix) and (p / data_file).exists()]
    return sorted(dirs, key=lambda p: p.stat().st_mtime, reverse=True)


def find_data_directory(specified: Optional[PathLike] = None, root: PathLike = ".",
                        prefix: str = DIR_PREFIX, data_file: str = DATA_FILE) -> Path:
    if specified:
        d = Path(specified)
        if d.is_dir() and (d / data_file).exists():
            return d
        raise BackupNotFoundError(f"Directory '{specified}' not found or doesn't contain {data_file}")
    dirs = list_backup_directories(root, prefix, data_file)
    if dirs:
        return dirs[0]
    if (Path(root) / data_file).exists():
        return Path(root)
    raise BackupNotFoundError("No backup data found. Extract a backup first.")


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise BackupReadError(f"{path}: invalid JSON: {e}") from e


def read_main_data(data_dir: PathLike, data_file: str = DATA_FILE) -> Dict[str, Any]:
    path = Path(data_dir) / data_file
    if not path.exists():
        raise BackupNotFoundError(f"{path} not found")
    return _read_json(path)


def read_archive_data(data_dir: PathLike, archive_file: str = ARCHIVE_FILE) -> Dict[str, Any]:
    """Archive index keyed by session string id; {} when the file is absent."""
    path = Path(data_dir) / archive_file
    if not path.exists():
        log.warning("archive file missing: %s", path)
        return {}
    data = _read_json(path)
    return data if isinstance(data, dict) else {}


def string_path(data_dir: PathLike, str_id: Union[str, int]) -> Path:
    return Path(data_dir) / f"{STRING_PREFIX}{str_id}{STRING_SUFFIX}"


def _id_key(s: str) -> Tuple[int, int, str]:
    return (0, int(s), s) if s.isdigit() else (1, 0, s)


def list_string_ids(data_dir: PathLike) -> List[str]:
    ids = [p.name[len(STRING_PREFIX):-len(STRING_SUFFIX)]
           for p in Path(data_dir).glob(f"{STRING_PREFIX}*{STRING_SUFFIX}")]
    return sorted(ids, key=_id_key)


def read_string(data_dir: PathLike, str_id: Union[str, int]) -> Optional[str]:
    """Inflate one session string file. None if the file does not exist."""
    path = string_path(data_dir, str_id)
    if not path.exists():
        log.info("string file not found: %s", path)
        return None
    raw = path.read_bytes()
    try:
        text = zlib.decompress(raw).decode("utf-8")
    except (zlib.error, UnicodeDecodeError) as e:
        raise BackupReadError(f"{path.name}: {e}") from e
    log.debug("read string %s: %d -> %d bytes", str_id, len(raw), len(text))
    return text


def read_string_json(data_dir: PathLike, str_id: Union[str, int]) -> Optional[Any]:
    text = read_string(data_dir, str_id)
    if text is None:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise BackupReadError(f"{string_path(data_dir, str_id).name}: invalid JSON: {e}") from e


@dataclass
class ShotFailure:
    index: int
    raw: Any
    error: str
    invalid: bool = False

    def to_record(self, **context: Any) -> Dict[str, Any]:
        """NDJSON log record for this failure."""
        data = {"index": self.index, "raw": self.raw, "error": self.error, "invalid": self.invalid}
        data.update(context)
        return {"type": "error", "msg": "shot_decode_failed", "data": data}


@dataclass
class FrameDecode:
    frame_id: Optional[str] = None
    label: Optional[str] = None
    shots: List[Shot] = field(default_factory=list)
    invalid: List[Shot] = field(default_factory=list)
    failures: List[ShotFailure] = field(default_factory=list)


def decode_shot_entry(entry: Any) -> Shot:
    """Decode one element of a frame's shot list.

    Strings are encoded shot records; dicts are shots the device already
    stored decoded.
    """
    if isinstance(entry, str):
        return decode_shot(entry)
    if isinstance(entry, dict):
        return shot_from_dict(entry)
    raise ShotCodecError(f"unsupported shot entry of type {type(entry).__name__}")


def decode_entries(entries: List[Any], invalid: bool = False) -> Tuple[List[Shot], List[ShotFailure]]:
    shots: List[Shot] = []
    failures: List[ShotFailure] = []
    for i, entry in enumerate(entries or []):
        try:
            shots.append(decode_shot_entry(entry))
        except (ShotCodecError, TypeError, ValueError) as e:
            failures.append(ShotFailure(index=i, raw=entry, error=str(e), invalid=invalid))
    return shots, failures


def decode_frame_shots(frame: Dict[str, Any], frame_id: Optional[str] = None) -> FrameDecode:
    """Decode a frame's shots and shots_invalid, skipping entries that fail."""
    out = FrameDecode(frame_id=frame_id or frame.get("id"), label=frame.get("label"))
    out.shots, failures = decode_entries(frame.get("shots") or [])
    out.invalid, invalid_failures = decode_entries(frame.get("shots_invalid") or [], invalid=True)
    out.failures = failures + invalid_failures
    for f in out.failures:
        log.warning("frame %s: shot %d failed to decode: %s", out.frame_id, f.index + 1, f.error)
    return out


def frames_with_shots(data: Dict[str, Any]) -> List[Tuple[str, Dict[str, Any]]]:
    frames = data.get("frames") or {}
    return [(str(fid), fr) for fid, fr in frames.items()
            if isinstance(fr, dict) and (fr.get("shots") or fr.get("shots_invalid"))]
