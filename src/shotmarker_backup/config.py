from __future__ import annotations
import math, yaml
from dataclasses import dataclass, field
from typing import Optional, List, Any, Dict

@dataclass
class BackupCfg:
    # Directory scanned for extracted backups when none is named explicitly
    root: str = "."
    # Extracted backup folders are named after the tar, e.g. SM_backup_Aug_13
    dir_prefix: str = "SM_backup_"
    data_file: str = "data.txt"
    archive_file: str = "archive.txt"

@dataclass
class ReportCfg:
    # Shots store velocity in m/s; reports show ft/s
    velocity_factor: float = 3.28084
    # Shot angles (theta/phi) are radians; reports show degrees
    angle_factor: float = 180.0 / math.pi
    # How many session strings read_backup previews
    sample_strings: int = 5
    preview_chars: int = 100

@dataclass
class LoggingCfg:
    dir: str = "./logs"
    file_prefix: str = "shotmarker"
    # 'regular' drops debug records from the main file unless whitelisted;
    # 'verbose' emits everything.
    mode: str = "regular"
    verbose_whitelist: Optional[List[str]] = None
    # When enabled every record is also written to `dir/debug_subdir`.
    dual_file: bool = False
    debug_subdir: Optional[str] = "debug"

@dataclass
class AppCfg:
    backup: BackupCfg = field(default_factory=BackupCfg)
    report: ReportCfg = field(default_factory=ReportCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)

def _as_float(d: Dict[str, Any], key: str, default: float) -> float:
    v = d.get(key, default)
    try:
        return float(v)
    except (TypeError, ValueError):
        return default

def _as_int(d: Dict[str, Any], key: str, default: int) -> int:
    v = d.get(key, default)
    try:
        return int(v)
    except (TypeError, ValueError):
        return default

def load_config(path: Optional[str] = None) -> AppCfg:
    """Load YAML config; every section and key is optional."""
    if not path:
        return AppCfg()
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    backup = BackupCfg(**raw.get("backup", {}))
    # Coerce report numeric fields to avoid YAML string issues
    rep_raw = dict(raw.get("report", {}))
    report = ReportCfg(
        velocity_factor=_as_float(rep_raw, "velocity_factor", ReportCfg.velocity_factor),
        angle_factor=_as_float(rep_raw, "angle_factor", ReportCfg.angle_factor),
        sample_strings=_as_int(rep_raw, "sample_strings", ReportCfg.sample_strings),
        preview_chars=_as_int(rep_raw, "preview_chars", ReportCfg.preview_chars),
    )
    log = LoggingCfg(**raw.get("logging", {}))
    return AppCfg(backup=backup, report=report, logging=log)
