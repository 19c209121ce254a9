from __future__ import annotations
import logging, tarfile
from pathlib import Path
from typing import List, Optional, Tuple

from .backup import BackupNotFoundError, BackupReadError, PathLike

log = logging.getLogger(__name__)


def default_extract_dir(tar_path: PathLike) -> Path:
    """SM_backup_Aug_13.tar -> SM_backup_Aug_13 (next to the tar)."""
    p = Path(tar_path)
    return p.with_name(p.stem)


def extract_backup(tar_path: PathLike, dest: Optional[PathLike] = None) -> Tuple[Path, List[str]]:
    """Extract a device backup tar. Returns the destination and its top-level entries."""
    src = Path(tar_path)
    if not src.is_file():
        raise BackupNotFoundError(f"{src} not found")
    out = Path(dest) if dest else default_extract_dir(src)
    if out.exists():
        log.info("directory %s already exists", out)
    out.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(src) as tar:
            tar.extractall(out, filter="data")
    except (tarfile.TarError, OSError) as e:
        raise BackupReadError(f"cannot extract {src}: {e}") from e
    entries = sorted(p.name for p in out.iterdir())
    log.info("extracted %s to %s (%d entries)", src, out, len(entries))
    return out, entries
