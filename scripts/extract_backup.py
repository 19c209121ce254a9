import argparse, logging, sys
from shotmarker_backup.backup import BackupError
from shotmarker_backup.extract import extract_backup

def main():
    ap = argparse.ArgumentParser(description="Extract a Shot Marker backup tar")
    ap.add_argument("tar", help="Path to the .tar backup file")
    ap.add_argument("dest", nargs="?", default=None, help="Extraction directory (default: tar name without extension)")
    args = ap.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        out, entries = extract_backup(args.tar, args.dest)
    except BackupError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"Extracted files ({len(entries)}) to {out.resolve()}:")
    for name in entries[:10]:
        print(f"  {name}")
    if len(entries) > 10:
        print(f"  ... and {len(entries) - 10} more files")

if __name__ == "__main__":
    main()
