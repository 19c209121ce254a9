import argparse, logging, sys
from shotmarker_backup.backup import BackupError, find_data_directory
from shotmarker_backup.config import load_config
from shotmarker_backup.export import write_matches_json, write_shots_csv
from shotmarker_backup.logs import NdjsonLogger
from shotmarker_backup.matches import extract_all_matches
from shotmarker_backup.report import summary_lines

def main():
    ap = argparse.ArgumentParser(description="Export the match results of a backup as JSON")
    ap.add_argument("directory", nargs="?", default=None, help="Backup folder with data.txt (default: most recent)")
    ap.add_argument("output", nargs="?", default="matches.json", help="JSON output file (default: matches.json)")
    ap.add_argument("--csv", default=None, help="Also write one row per shot to this CSV file")
    ap.add_argument("--config", default=None, help="YAML config file")
    args = ap.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    cfg = load_config(args.config)
    bcfg = cfg.backup

    try:
        data_dir = find_data_directory(args.directory, bcfg.root, bcfg.dir_prefix, bcfg.data_file)
    except BackupError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    logger = NdjsonLogger.from_config(cfg.logging)
    try:
        res = extract_all_matches(data_dir, cfg.report, logger, archive_file=bcfg.archive_file)
    except BackupError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        logger.close()
    print(f"Processed {res.processed} matches, skipped {res.skipped} entries, {res.failed_shots} shots failed to decode")
    out = write_matches_json(res.matches, args.output)
    print(f"Extracted {len(res.matches)} matches to {out}")
    if args.csv:
        n = write_shots_csv(res.matches, args.csv)
        print(f"Wrote {n} shot rows to {args.csv}")
    for line in summary_lines(res.matches):
        print(line)

if __name__ == "__main__":
    main()
