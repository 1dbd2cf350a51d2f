import argparse
import asyncio
import logging
import sys
import tqdm

from data_loader import DataLoader
from sensors.replay_source import LogReplayer
from sensors.session import TrackingSession
from tracking.config import profile_db
from tracking.errors import TrackingError
from visualizer import PoseRecorder, Visualizer


async def replay(log_path, config, realtime=False, speed=1.0):
    loader = DataLoader()
    sensor_log = loader.load_data(log_path)
    print(f"Loaded {len(sensor_log.motion)} motion and {len(sensor_log.orientation)} orientation samples "
          f"({sensor_log.duration_s:.2f}s).")

    replayer = LogReplayer(sensor_log.events(), realtime=realtime, speed=speed,
                           frame_rate_hz=config.frame_rate_hz)
    session = TrackingSession(replayer.motion, replayer.orientation, config=config)
    recorder = PoseRecorder(session.pose)

    async with session:
        if not session.tracking:
            print("No sensor stream could be started.")
            return session, recorder
        with tqdm.tqdm(total=len(replayer.events), desc="Replay") as bar:
            await replayer.run(on_frame=recorder.on_frame, progress=bar.update)
        print(f"Skipped {session.rejected_samples} unusable samples.")
    return session, recorder


def main(argv=None):
    parser = argparse.ArgumentParser(description="Handheld AR pose tracker - replay a sensor log")
    parser.add_argument("--log", type=str, default=None, help="Path to sensor log .txt")
    parser.add_argument("--profile", type=str, default="ar_camera", help="Tracking profile name")
    parser.add_argument("--profiles-file", type=str, default=None, help="JSON file with extra profiles")
    parser.add_argument("--threshold", type=float, default=None, help="Noise threshold override (m/s²)")
    parser.add_argument("--friction", type=float, default=None,
                        help="Fraction of velocity retained per zero-acceleration sample (0-1)")
    parser.add_argument("--fps", type=float, default=None, help="Render frame rate override")
    parser.add_argument("--realtime", action="store_true", help="Pace the replay at recorded speed")
    parser.add_argument("--speed", type=float, default=1.0, help="Playback speed multiplier for --realtime")
    parser.add_argument("--html", type=str, default=None, help="Write an interactive HTML replay here")
    parser.add_argument("--csv", type=str, default=None, help="Write per-frame poses to CSV")
    parser.add_argument("--list-profiles", action="store_true", help="Print the available tracking profiles and exit")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    if args.log is None and not args.list_profiles:
        parser.error("--log is required unless --list-profiles is given")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        if args.profiles_file:
            profile_db.load_json(args.profiles_file)
        if args.list_profiles:
            for name, notes in profile_db.list_profiles().items():
                print(f"{name:<16} {notes}")
            return 0

        config = profile_db.get_config(args.profile).with_overrides(
            noise_threshold=args.threshold, friction=args.friction, frame_rate_hz=args.fps
        )
        print(f"Tracking Config: thresholds={config.thresholds} m/s², friction={config.friction}")

        session, recorder = asyncio.run(replay(args.log, config, realtime=args.realtime, speed=args.speed))
    except (TrackingError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("\n--- Final Pose ---")
    print(session.pose.format_telemetry())

    if args.csv and len(recorder.recording):
        recorder.recording.to_dataframe().to_csv(args.csv, index=False)
        print(f"Poses saved to {args.csv}")

    if args.html and len(recorder.recording):
        Visualizer(recorder.recording).save_html(args.html)

    return 0


if __name__ == "__main__":
    sys.exit(main())
