from __future__ import annotations
import dataclasses, math, struct, time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from .errors import TruncatedRecordError
from .transcoder import BytesLike, decode_bytes, encode_bytes

# 32-byte shot record, little-endian:
#   [0-7] ts ms u64, [8-11] x*1000 s32, [12-15] y*1000 s32, [16-19] v*100 u32,
#   [20] temp, [21] multi_assign, [22] error, [23-31] reserved (zero)
SHOT_RECORD_LEN = 32
_LAYOUT = struct.Struct("<QiiIBBB9x")

XY_SCALE = 1000
V_SCALE = 100
DEFAULT_TEMP = 20

_U64 = 0xFFFFFFFFFFFFFFFF
_U32 = 0xFFFFFFFF


@dataclass
class Shot:
    """One decoded impact: position in target units, velocity, status bytes."""
    ts: Optional[int] = None
    x: float = 0.0
    y: float = 0.0
    v: float = 0.0
    temp: int = DEFAULT_TEMP
    multi_assign: int = 0
    error: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


ShotLike = Union[Shot, Mapping[str, Any], None]


def _s32(u: int) -> int:
    return struct.unpack('<i', struct.pack('<I', u & _U32))[0]


def _scaled(value: Any, scale: int) -> int:
    # round half up, matching the device firmware; NaN/inf pack as 0
    scaled = float(value or 0) * scale
    if not math.isfinite(scaled):
        return 0
    return math.floor(scaled + 0.5)


def _byte(value: Any, default: int) -> int:
    if value is None:
        return default
    return max(0, min(255, int(value)))


def _fields(shot: ShotLike) -> Dict[str, Any]:
    if shot is None:
        return {}
    if isinstance(shot, Shot):
        return shot.to_dict()
    if isinstance(shot, Mapping):
        return dict(shot)
    raise TypeError(f"cannot pack {type(shot).__name__} as a shot")


def pack_shot(shot: ShotLike = None, *, now_ms: Optional[int] = None) -> bytes:
    """Pack a shot into its fixed 32-byte record.

    Absent fields default to: ts -> current time (or now_ms), x/y/v -> 0,
    temp -> 20, multi_assign/error -> 0. ts, x and y are masked to their
    width; v and the single-byte fields are clamped. Non-finite x/y/v pack as 0.
    """
    f = _fields(shot)
    ts = f.get("ts")
    if ts is None:
        ts = now_ms if now_ms is not None else int(time.time() * 1000)
    return _LAYOUT.pack(
        int(ts) & _U64,
        _s32(_scaled(f.get("x"), XY_SCALE)),
        _s32(_scaled(f.get("y"), XY_SCALE)),
        max(0, min(_U32, _scaled(f.get("v"), V_SCALE))),
        _byte(f.get("temp"), DEFAULT_TEMP),
        _byte(f.get("multi_assign"), 0),
        _byte(f.get("error"), 0),
    )


def unpack_shot(data: BytesLike) -> Shot:
    """Unpack the first 32 bytes of data. Raises TruncatedRecordError if short."""
    buf = bytes(data)
    if len(buf) < SHOT_RECORD_LEN:
        raise TruncatedRecordError(len(buf), SHOT_RECORD_LEN)
    ts, x, y, v, temp, multi_assign, error = _LAYOUT.unpack_from(buf, 0)
    return Shot(
        ts=ts,
        x=x / float(XY_SCALE),
        y=y / float(XY_SCALE),
        v=v / float(V_SCALE),
        temp=temp,
        multi_assign=multi_assign,
        error=error,
    )


def encode_shot(shot: ShotLike = None, *, now_ms: Optional[int] = None) -> str:
    return encode_bytes(pack_shot(shot, now_ms=now_ms))


def decode_shot(text: str, strict: bool = True) -> Shot:
    """Decode a shot string. Raises MalformedInputError or TruncatedRecordError."""
    return unpack_shot(decode_bytes(text, strict=strict))


def shot_from_dict(d: Mapping[str, Any]) -> Shot:
    """Build a Shot from an already-decoded JSON shot, ignoring unknown keys."""
    known = {f.name for f in dataclasses.fields(Shot)}
    return Shot(**{k: v for k, v in d.items() if k in known and v is not None})
