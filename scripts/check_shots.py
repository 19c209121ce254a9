import argparse, logging, sys
from shotmarker_backup.backup import BackupError, decode_frame_shots, find_data_directory, frames_with_shots, read_main_data
from shotmarker_backup.codec.shotpack import decode_shot, encode_shot
from shotmarker_backup.config import load_config
from shotmarker_backup.report import format_shot

# Tolerances of the 1/1000 position quantization
POS_TOL = 0.0005

def main():
    ap = argparse.ArgumentParser(description="Decode every frame shot and check the re-encode round trip")
    ap.add_argument("directory", nargs="?", default=None, help="Backup folder with data.txt (default: most recent)")
    ap.add_argument("--config", default=None, help="YAML config file")
    args = ap.parse_args()
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    cfg = load_config(args.config)
    bcfg = cfg.backup

    try:
        data_dir = find_data_directory(args.directory, bcfg.root, bcfg.dir_prefix, bcfg.data_file)
        data = read_main_data(data_dir, bcfg.data_file)
    except BackupError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    frames = frames_with_shots(data)
    print(f"Found {len(frames)} frames with shot data\n")
    bad = 0
    for fid, frame in frames:
        print(f"Frame {fid} ({frame.get('label')}): {frame.get('dist')} {frame.get('dist_unit')}, "
              f"target {frame.get('width')}x{frame.get('height')}")
        dec = decode_frame_shots(frame, fid)
        for i, shot in enumerate(dec.shots, start=1):
            again = decode_shot(encode_shot(shot))
            ok = abs(shot.x - again.x) <= POS_TOL and abs(shot.y - again.y) <= POS_TOL
            bad += 0 if ok else 1
            print(format_shot(i, shot, cfg.report) + f" round-trip: {'PASS' if ok else 'FAIL'}")
        for f in dec.failures:
            bad += 1
            print(f"  Shot {f.index + 1}: Decode error - {f.error}")
        print()
    sys.exit(1 if bad else 0)

if __name__ == "__main__":
    main()
