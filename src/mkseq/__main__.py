"""
Command-line interface for mkseq.
Provides commands for sequencing photos and managing configuration.
"""

import argparse
import sys
from pathlib import Path

from mkseq.core.config import (
    TransformationConfig,
    create_default_config,
    parse_bearing,
    parse_nodes,
    parse_number,
    parse_speed,
)
from mkseq.errors import SequencerError
from mkseq.processors.metadata_io import JsonManifestSource, JsonSidecarWriter
from mkseq.processors.sequencer import Sequencer
from mkseq.utils.time_resolver import TemporalResolver


def apply_overrides(config: TransformationConfig, args) -> TransformationConfig:
    """
    Apply command line options on top of a loaded configuration.

    Raises:
        ConfigurationError: If a value is malformed or options conflict
    """
    if args.smooth is not None:
        config.smooth.enabled = True
        config.smooth.nodes = parse_nodes(args.smooth, "--smooth")
    if args.interpolate:
        config.interpolate_linear = True
    if args.center is not None:
        config.center.enabled = True
        config.center.degrees, config.center.degrees_ref = parse_bearing(args.center, "--center")
    if args.normalize is not None:
        config.normalize_bearing = args.normalize
    if args.altitude is not None:
        config.altitude.keep = True
        config.altitude.value = parse_number(args.altitude, "--altitude")
    if args.timestamp or args.overwrite_timestamp:
        config.timestamp.enabled = True
    if args.overwrite_timestamp:
        config.timestamp.overwrite = True
    if args.utc:
        config.timestamp.utc = True
    if args.speed is not None:
        config.speed.enabled = True
        config.speed.value, config.speed.unit = parse_speed(args.speed, "--speed")
    if args.area_info is not None:
        config.area_information = args.area_info
    if args.preserve_mtime:
        config.preserve_timestamp = True
    if args.log_level:
        config.log_level = args.log_level

    config.validate()
    return config


def cmd_run(args):
    """Sort, transform and write a photo sequence."""
    print("🗺️  mkseq - Photo Sequence")
    print("=" * 60)

    manifest_path = Path(args.manifest)
    if not manifest_path.exists():
        print(f"❌ Manifest not found: {manifest_path}")
        return 1

    try:
        if args.config:
            config_path = Path(args.config)
            if not config_path.exists():
                print(f"❌ Configuration file not found: {config_path}")
                print("💡 Use 'python -m mkseq init' to create a default config")
                return 1
            config = TransformationConfig.from_yaml(str(config_path))
        else:
            config = TransformationConfig()

        config = apply_overrides(config, args)

        source = JsonManifestSource(str(manifest_path))
        writer = JsonSidecarWriter(args.output, preserve_mtime=config.preserve_timestamp)
        sequencer = Sequencer(config, source, writer)
        records = sequencer.run(source.file_ids)
        writer.write_summary()

        print(f"✅ {len(records)} photos written to: {args.output}")
        return 0

    except SequencerError as e:
        print(f"❌ Error: {e}")
        return 1


def cmd_init(args):
    """Initialize a new configuration file."""
    output_path = Path(args.output)

    if output_path.exists() and not args.force:
        print(f"❌ Configuration file already exists: {output_path}")
        print("💡 Use --force to overwrite")
        return 1

    try:
        create_default_config(str(output_path))
    except OSError as e:
        print(f"❌ Error creating configuration: {e}")
        return 1

    print(f"✅ Configuration file created: {output_path}")
    print()
    print("📝 Next steps:")
    print(f"   1. Edit {output_path} with your settings")
    print(f"   2. Run: python -m mkseq run manifest.json -o output --config {output_path}")
    return 0


def cmd_info(args):
    """Display the resolved sequence order and each photo's metadata."""
    from mkseq.core.sequence import SequenceRecord

    manifest_path = Path(args.manifest)
    if not manifest_path.exists():
        print(f"❌ Manifest not found: {manifest_path}")
        return 1

    try:
        source = JsonManifestSource(str(manifest_path))
        resolver = TemporalResolver(source, fallback=True, utc=args.utc)
        ordered = resolver.sort(source.file_ids)

        print(f"📷 Sequence Information: {manifest_path}")
        print("=" * 60)
        print(f"Photos: {len(ordered)}")
        print()
        for index, file_id in enumerate(ordered):
            record = SequenceRecord.from_metadata(file_id, source.read(file_id))
            print(f"{index + 1:>4}. {record.describe(utc=args.utc, iso=args.iso)}")
        return 0

    except SequencerError as e:
        print(f"❌ Error reading manifest: {e}")
        return 1


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="mkseq",
        description="Prepare geotagged photo sequences for map publishing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Initialize configuration
  python -m mkseq init

  # Smooth positions over 5 photos and normalize bearings
  python -m mkseq run photos/manifest.json -o output --smooth 5

  # Arrange a panorama rig, first photo facing 90 degrees true north
  python -m mkseq run photos/manifest.json -o output --center 90T

  # View resolved order and metadata
  python -m mkseq info photos/manifest.json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    parser_run = subparsers.add_parser(
        "run",
        help="Sort, transform and write a photo sequence"
    )
    parser_run.add_argument(
        "manifest",
        help="JSON manifest describing the photos"
    )
    parser_run.add_argument(
        "--output", "-o",
        required=True,
        help="Output directory for the processed records"
    )
    parser_run.add_argument(
        "--config", "-c",
        help="Configuration file path"
    )
    parser_run.add_argument(
        "--smooth", "-s",
        metavar="NODES",
        help="Smooth positions over NODES photos (0 = whole sequence)"
    )
    parser_run.add_argument(
        "--interpolate", "-l",
        action="store_true",
        help="Space positions evenly between the first and last photo"
    )
    parser_run.add_argument(
        "--center",
        metavar="DEGREES[T|M]",
        help="Collapse photos onto their center with outward bearings"
    )
    parser_run.add_argument(
        "--normalize", "-n",
        dest="normalize",
        action="store_true",
        default=None,
        help="Point each photo towards the next one"
    )
    parser_run.add_argument(
        "--no-normalize",
        dest="normalize",
        action="store_false",
        help="Keep the source bearings"
    )
    parser_run.add_argument(
        "--altitude", "-a",
        metavar="METERS",
        help="Keep altitudes, filling missing ones with METERS"
    )
    parser_run.add_argument(
        "--timestamp", "-t",
        action="store_true",
        help="Add missing GPS time stamps from EXIF or file time stamps"
    )
    parser_run.add_argument(
        "--overwrite-timestamp",
        action="store_true",
        help="Replace GPS time stamps with the file modification time"
    )
    parser_run.add_argument(
        "--utc", "-u",
        action="store_true",
        help="Interpret EXIF time stamps as UTC"
    )
    parser_run.add_argument(
        "--speed", "-p",
        metavar="VALUE[K|M|N]",
        help="Set a fixed speed in km/h (K), mph (M) or knots (N)"
    )
    parser_run.add_argument(
        "--area-info", "-x",
        help="Set the GPS area information of every photo"
    )
    parser_run.add_argument(
        "--preserve-mtime", "-k",
        action="store_true",
        help="Give each output the modification time of its photo"
    )
    parser_run.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level from config"
    )
    parser_run.set_defaults(func=cmd_run)

    # Init command
    parser_init = subparsers.add_parser(
        "init",
        help="Create default configuration file"
    )
    parser_init.add_argument(
        "--output", "-o",
        default="config.yaml",
        help="Output configuration file path (default: config.yaml)"
    )
    parser_init.add_argument(
        "--force", "-f",
        action="store_true",
        help="Overwrite existing configuration file"
    )
    parser_init.set_defaults(func=cmd_init)

    # Info command
    parser_info = subparsers.add_parser(
        "info",
        help="Display resolved order and photo metadata"
    )
    parser_info.add_argument(
        "manifest",
        help="JSON manifest describing the photos"
    )
    parser_info.add_argument(
        "--utc", "-u",
        action="store_true",
        help="Interpret and show time stamps in UTC"
    )
    parser_info.add_argument(
        "--iso", "-i",
        action="store_true",
        help="Show ISO 8601 time stamps"
    )
    parser_info.set_defaults(func=cmd_info)

    # Parse arguments
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    # Execute command
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
