import argparse, json, logging, sys
from shotmarker_backup.backup import BackupError, decode_entries, find_data_directory, read_string
from shotmarker_backup.config import load_config
from shotmarker_backup.explore import PARSE_ERROR, explore_string_files, group_by_kind, id_timestamp
from shotmarker_backup.report import format_shot, format_string_summary

def examine(data_dir, str_id, cfg):
    try:
        text = read_string(data_dir, str_id)
    except BackupError as e:
        print(f"Error: {e}")
        return 1
    if text is None:
        print("File not found")
        return 1
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        print(f"Parse error: {e}")
        print(f"Content preview: {text[:200]}...")
        return 1
    print(f"Timestamp: {id_timestamp(str(str_id))}")
    print(f"Frame ID: {data.get('id')}")
    print(f"Label: {data.get('label') or 'No label'}")
    print(f"Active: {data.get('active')}")
    print(f"Target: {data.get('width')}x{data.get('height')} at {data.get('dist')} {data.get('dist_unit')}")
    print(f"Face ID: {data.get('face_id')}")
    shots, failures = decode_entries(data.get("shots") or [])
    if shots or failures:
        print(f"\nShots ({len(shots) + len(failures)}):")
        for i, shot in enumerate(shots, start=1):
            print(format_shot(i, shot, cfg.report))
        for f in failures:
            print(f"  Shot {f.index + 1}: Decode error - {f.error}")
    if data.get("shots_invalid"):
        print(f"\nInvalid shots: {len(data['shots_invalid'])}")
    if data.get("profiles"):
        print(f"\nProfiles: {len(data['profiles'])}")
    if data.get("score_string"):
        print(f"\nScore string: {str(data['score_string'])[:100]}...")
    return 0

def main():
    ap = argparse.ArgumentParser(description="Inventory the compressed session strings of a backup")
    ap.add_argument("string_id", nargs="?", default=None, help="Examine one string file in detail")
    ap.add_argument("--dir", default=None, help="Backup folder with data.txt (default: most recent)")
    ap.add_argument("--config", default=None, help="YAML config file")
    args = ap.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    cfg = load_config(args.config)
    bcfg = cfg.backup

    try:
        data_dir = find_data_directory(args.dir, bcfg.root, bcfg.dir_prefix, bcfg.data_file)
    except BackupError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.string_id:
        sys.exit(examine(data_dir, args.string_id, cfg))

    summaries = explore_string_files(data_dir)
    print(f"Total string files: {len(summaries)}\n")
    print("File types found:")
    for kind, items in sorted(group_by_kind(summaries).items()):
        print(f"  {kind}: {len(items)} files")
    with_shots = [s for s in summaries if s.has_shots]
    print(f"\nFiles with shot data: {len(with_shots)}")
    for s in with_shots:
        day = s.timestamp.date().isoformat() if s.timestamp else "?"
        print(f"  {s.id} ({day}): Frame {s.frame_id} \"{s.label or ''}\" - {s.shot_count} shots")
    print("\nMost recent files (last 10):")
    for s in summaries[-10:]:
        print(format_string_summary(s))
    errors = [s for s in summaries if s.kind == PARSE_ERROR]
    if errors:
        print(f"\nParse errors ({len(errors)}):")
        for s in errors[:5]:
            print(f"  {s.id}: {s.error}")
            print(f"    Preview: {s.preview}...")

if __name__ == "__main__":
    main()
