from __future__ import annotations
import csv, json
from pathlib import Path
from typing import Iterable, List

from .backup import PathLike
from .matches import MatchRecord

CSV_COLUMNS = [
    "match", "user", "timestamp", "distance", "target_face", "shot",
    "x", "y", "score", "sighter", "velocity", "yaw", "pitch", "tags", "quality",
]


def matches_to_json(matches: Iterable[MatchRecord]) -> str:
    return json.dumps([m.to_json_dict() for m in matches], indent=2)


def write_matches_json(matches: List[MatchRecord], path: PathLike) -> Path:
    out = Path(path)
    out.write_text(matches_to_json(matches) + "\n", encoding="utf-8")
    return out


def write_shots_csv(matches: List[MatchRecord], path: PathLike) -> int:
    """One row per shot across all matches. Returns the row count."""
    n = 0
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_COLUMNS, extrasaction="ignore")
        w.writeheader()
        for m in matches:
            head = m.to_json_dict()
            for i, row in enumerate(m.shot_data, start=1):
                w.writerow({
                    "match": head["match"],
                    "user": head["user"],
                    "timestamp": head["timestamp"],
                    "distance": head["distance"],
                    "shot": i,
                    **row,
                })
                n += 1
    return n
