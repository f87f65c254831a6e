#!/usr/bin/env python3
"""
wavscan - remap channels of a PCM WAV file or compute per-chunk statistics.
"""

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

from wavscan.config.scan_config import ScanConfig, VALID_LOG_LEVELS, get_config, parse_channel_operations
from wavscan.core.file_scanner import FileScanner
from wavscan.utils.exceptions import AudioProcessingError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="wavscan - PCM WAV channel processing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=VALID_LOG_LEVELS,
        default=None,
        help="Logging level (default: LOG_LEVEL env var or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    process_parser = subparsers.add_parser("process", help="Copy/adjust channels into a new file")
    process_parser.add_argument("input", help="Source WAV file")
    process_parser.add_argument("output", help="Destination WAV file")
    process_parser.add_argument(
        "--op",
        dest="operations",
        action="append",
        required=True,
        metavar="IN:OUT[:adjust]",
        help="Channel operation, may be repeated (e.g. --op 0:1 --op 1:0:adjust)",
    )
    process_parser.add_argument(
        "--channels", type=int, default=None, help="Output channel count (default: same as input)"
    )
    process_parser.add_argument("--chunk-ms", type=int, default=None, help="Chunk duration in milliseconds")
    process_parser.add_argument("--gain-db", type=float, default=None, help="Gain for adjust operations")

    stats_parser = subparsers.add_parser("stats", help="Print per-chunk mean and average delta")
    stats_parser.add_argument("input", help="Source WAV file")
    stats_parser.add_argument("--chunk-ms", type=int, default=None, help="Chunk duration in milliseconds")
    stats_parser.add_argument("--json", action="store_true", help="Print statistics as JSON")

    return parser


def run_process(args, config: ScanConfig) -> int:
    operations = parse_channel_operations(args.operations)
    chunk_size_ms = args.chunk_ms or config.chunk_size_ms
    gain_db = args.gain_db if args.gain_db is not None else config.adjust_gain_db

    scanner = FileScanner(adjust_gain_db=gain_db, overwrite_output=config.overwrite_output)
    with scanner:
        scanner.open(args.input)
        scanner.set_output(args.output, channels=args.channels)
        scanner.process(operations, chunk_size_ms)

    if scanner.frames_total:
        percent = 100 * scanner.processed_frames // scanner.frames_total
        logger.info(f"✅ Done: {scanner.processed_frames}/{scanner.frames_total} frames ({percent}%)")
    return 0


def run_stats(args, config: ScanConfig) -> int:
    chunk_size_ms = args.chunk_ms or config.chunk_size_ms

    with FileScanner() as scanner:
        scanner.open(args.input)
        statistics = scanner.calculate_statistics(chunk_size_ms)

    if args.json:
        print(json.dumps(statistics.to_dict(), indent=2))
        return 0

    print("\n" + "=" * 50)
    print(f"📊 STATISTICS ({statistics.chunk_size} frames per chunk)")
    print("=" * 50)
    for channel in statistics.channels:
        print(f"\n🎚️  Channel {channel.channel}:")
        for index, (mean, delta) in enumerate(zip(channel.means, channel.average_deltas)):
            print(f"   • chunk {index}: mean={mean} avg_delta={delta}")
    print("=" * 50)
    return 0


def main(argv=None) -> int:
    """Main entry point for the wavscan command line."""
    load_dotenv()

    args = build_parser().parse_args(argv)
    log_level = args.log_level or os.getenv('LOG_LEVEL', 'INFO').upper()

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
        ],
    )
    logging.getLogger('wavscan').setLevel(getattr(logging, log_level, logging.INFO))

    try:
        config = get_config()
        if args.command == "process":
            return run_process(args, config)
        return run_stats(args, config)
    except (AudioProcessingError, ValueError, OSError) as e:
        logger.error(f"❌ {args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
