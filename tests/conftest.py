import json
import sys
import zlib
from pathlib import Path

import pytest

# Ensure the 'src' directory (where the package lives) is importable
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
sys.path.insert(0, str(SRC_DIR))


def write_string_file(d: Path, str_id, doc) -> Path:
    text = doc if isinstance(doc, str) else json.dumps(doc)
    p = d / f"string-{str_id}.z"
    p.write_bytes(zlib.compress(text.encode("utf-8")))
    return p


@pytest.fixture
def make_backup(tmp_path: Path):
    """Build an extracted backup folder: data.txt, archive.txt, string-*.z."""
    def _make(name="SM_backup_Test", data=None, archive=None, strings=None, root=None):
        d = (root or tmp_path) / name
        d.mkdir(parents=True)
        (d / "data.txt").write_text(json.dumps(data if data is not None else {"version": 1, "frames": {}}), encoding="utf-8")
        if archive is not None:
            (d / "archive.txt").write_text(json.dumps(archive), encoding="utf-8")
        for sid, doc in (strings or {}).items():
            write_string_file(d, sid, doc)
        return d
    return _make
