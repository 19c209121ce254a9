import argparse, logging, sys
from shotmarker_backup.backup import (BackupError, decode_frame_shots, find_data_directory,
                                      frames_with_shots, list_backup_directories, list_string_ids,
                                      read_archive_data, read_main_data, read_string)
from shotmarker_backup.config import load_config
from shotmarker_backup.logs import NdjsonLogger
from shotmarker_backup.matches import ms_to_datetime
from shotmarker_backup.report import format_shot

def main():
    ap = argparse.ArgumentParser(description="Print the frames, shots and session strings of a backup")
    ap.add_argument("directory", nargs="?", default=None, help="Backup folder with data.txt (default: most recent)")
    ap.add_argument("--config", default=None, help="YAML config file")
    args = ap.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    cfg = load_config(args.config)
    bcfg = cfg.backup

    try:
        data_dir = find_data_directory(args.directory, bcfg.root, bcfg.dir_prefix, bcfg.data_file)
        main_data = read_main_data(data_dir, bcfg.data_file)
    except BackupError as e:
        print(f"Error: {e}", file=sys.stderr)
        for d in list_backup_directories(bcfg.root, bcfg.dir_prefix, bcfg.data_file):
            print(f"  available: {d}", file=sys.stderr)
        sys.exit(1)

    logger = NdjsonLogger.from_config(cfg.logging)
    logger.write({"type": "info", "msg": "read_backup", "data": {"dir": str(data_dir)}})
    print(f"Using data directory: {data_dir.resolve()}")
    print(f"Version: {main_data.get('version')}")
    print(f"Timestamp: {ms_to_datetime(main_data.get('ts'))}")
    print(f"Number of frames: {len(main_data.get('frames') or {})}")

    frames = frames_with_shots(main_data)
    print(f"\nFrames with shot data: {len(frames)}")
    for fid, frame in frames:
        print(f"\n--- Frame {fid} ({frame.get('label') or 'No label'}) ---")
        dec = decode_frame_shots(frame, fid)
        for i, shot in enumerate(dec.shots, start=1):
            print(format_shot(i, shot, cfg.report))
        for i, shot in enumerate(dec.invalid, start=1):
            print(format_shot(i, shot, cfg.report, invalid=True))
        for f in dec.failures:
            print(f"  Shot {f.index + 1}: Error decoding - {f.error}")
            logger.write(f.to_record(frame=fid))

    archive = read_archive_data(data_dir, bcfg.archive_file)
    print(f"\nArchive entries: {len(archive)}")

    ids = list_string_ids(data_dir)
    print(f"\nFound {len(ids)} string files")
    for sid in ids[:cfg.report.sample_strings]:
        try:
            text = read_string(data_dir, sid)
        except BackupError as e:
            print(f"String {sid}: {e}")
            continue
        if text:
            print(f"String {sid} (first {cfg.report.preview_chars} chars): {text[:cfg.report.preview_chars]}...")
    logger.close()

if __name__ == "__main__":
    main()
