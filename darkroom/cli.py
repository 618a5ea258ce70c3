"""
Command Line Interface for image conversions and regeneration.
"""

import argparse
import json
import logging
import sys
import urllib3
from pathlib import Path
from typing import List, Optional

from .config import DarkroomConfig
from .conversion_manager import ConversionManager
from .discovery import ImageDiscoveryService
from .disk import DiskManager
from .errors import DarkroomError, InvalidOptions
from .image_converter import ImageConverter
from .json_store import JsonRecordStore
from .local_client import LocalConfig, LocalDisk
from .presets import PresetRegistry, default_registry
from .regenerate_options import RegenerationOptions
from .regeneration_progress import RegenerationProgress
from .regenerator import Regenerator
from .reporter import RegenerationReporter
from .s3_client import S3Disk
from .s3_config import S3Config


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    return logging.getLogger('darkroom')


def get_s3_config(args: argparse.Namespace) -> S3Config:
    """Get S3 configuration from environment and CLI overrides."""
    config = S3Config.from_env()

    if getattr(args, 's3_endpoint', None):
        config.endpoint = args.s3_endpoint
    if getattr(args, 's3_bucket', None):
        config.bucket = args.s3_bucket
    if getattr(args, 's3_prefix', None):
        config.prefix = args.s3_prefix
    if getattr(args, 's3_access_key', None):
        config.access_key = args.s3_access_key
    if getattr(args, 's3_secret_key', None):
        config.secret_key = args.s3_secret_key

    return config


def get_disks(args: argparse.Namespace, config: DarkroomConfig, logger: logging.Logger) -> DiskManager:
    """
    Build the disk registry from arguments.

    --local-root registers a local disk, otherwise S3 settings are used.
    The disk is registered under --disk-name (default: the configured disk).

    Raises:
        ValueError: If the storage configuration is invalid
    """
    disks = DiskManager(logger)
    name = getattr(args, 'disk_name', None) or config.disk
    local_root = getattr(args, 'local_root', None)

    if local_root:
        local_config = LocalConfig(root_path=local_root, base_url=args.base_url)
        errors = local_config.validate()
        if errors:
            for error in errors:
                logger.error(error)
            raise ValueError("Local configuration invalid")
        disks.register(name, LocalDisk(local_config, logger))
        logger.info(f"Storage: Local filesystem ({local_config.root_path}) as disk '{name}'")
    else:
        s3_config = get_s3_config(args)
        errors = s3_config.validate()
        if errors:
            for error in errors:
                logger.error(error)
            raise ValueError("S3 configuration invalid")
        disks.register(name, S3Disk(s3_config, logger))
        logger.info(f"Storage: S3 ({s3_config.endpoint or 'default endpoint'}) bucket {s3_config.bucket} as disk '{name}'")

    return disks


def add_storage_arguments(parser: argparse.ArgumentParser) -> None:
    """Add storage configuration arguments to a parser."""
    parser.add_argument('--disk-name', help='Name the storage is registered under (default: DARKROOM_DISK)')

    local_group = parser.add_argument_group('Local Storage')
    local_group.add_argument('--local-root', metavar='PATH',
                             help='Use local filesystem instead of S3 (e.g., /var/www/storage)')
    local_group.add_argument('--base-url', default='/storage',
                             help='Public URL prefix for local files (default: /storage)')

    s3_group = parser.add_argument_group('S3 Storage')
    s3_group.add_argument('--s3-endpoint', help='Override S3_ENDPOINT')
    s3_group.add_argument('--s3-bucket', help='Override S3_BUCKET')
    s3_group.add_argument('--s3-prefix', help='Override S3_PREFIX')
    s3_group.add_argument('--s3-access-key', help='Override S3_ACCESS_KEY')
    s3_group.add_argument('--s3-secret-key', help='Override S3_SECRET_KEY')


def options_from_args(args: argparse.Namespace) -> RegenerationOptions:
    """Build regeneration options from parsed arguments."""
    record_id = args.id
    if record_id is not None and record_id.isdigit():
        record_id = int(record_id)

    return RegenerationOptions(
        all=args.all,
        models=args.models,
        blocks=args.blocks,
        seo=args.seo,
        model=args.model,
        block_type=args.block_type,
        field=args.field,
        id=record_id,
        conversion=args.conversion,
        disk=args.disk,
        dry_run=args.dry_run,
        force=args.force,
        backup=args.backup,
        keep_on_fail=not args.no_keep_on_fail,
        verbose=args.verbose,
        quiet=args.quiet,
        json=args.json,
    )


def confirm(prompt: str) -> bool:
    """Ask a yes/no question on the terminal."""
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ('y', 'yes')


def cmd_regenerate(args: argparse.Namespace) -> int:
    """Execute regenerate command."""
    options = options_from_args(args)

    errors = options.validate()
    if errors:
        for error in errors:
            print(f"Error: {error.message}", file=sys.stderr)
        return 1

    logger = setup_logging(args.verbose)
    if options.quiet or options.json:
        logger.setLevel(logging.ERROR)
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    config = DarkroomConfig.from_env()
    try:
        records = JsonRecordStore.load(args.records, logger=logger)
        logger.info(f"Loaded records: {args.records}")
    except FileNotFoundError:
        logger.error(f"Records file not found: {args.records}")
        return 1
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load records: {e}")
        return 1

    try:
        disks = get_disks(args, config, logger)
    except ValueError:
        return 1

    discovery = ImageDiscoveryService(records.models, records.blocks, records.seo, logger=logger)
    regenerator = Regenerator(
        discovery=discovery,
        converter=ImageConverter(disks, config, logger),
        registry=default_registry(config.quality, logger),
        workers=args.workers,
        logger=logger,
    )
    reporter = RegenerationReporter(options)

    try:
        counts = discovery.count_by_type(options)
        reporter.report_summary(counts['total'], counts)

        if counts['total'] == 0:
            logger.info("No images found")
            return 0

        if not (options.force or options.dry_run or options.quiet or options.json):
            if not confirm(f"Regenerate {counts['total']} images?"):
                logger.info("Cancelled")
                return 1

        progress = None
        if not (options.quiet or options.json):
            progress = RegenerationProgress(show_files=options.verbose, logger=logger)

        stats = regenerator.run(options, progress)
        reporter.report_results(stats)
        return reporter.exit_code(stats)

    except InvalidOptions as e:
        for error in e.errors:
            logger.error(error.message)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as e:
        logger.exception(f"Regeneration failed: {e}")
        return 1
    finally:
        disks.close()


def cmd_convert(args: argparse.Namespace) -> int:
    """Execute convert command: store one file and its conversions."""
    logger = setup_logging(args.verbose)
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    config = DarkroomConfig.from_env()
    source = Path(args.source)
    if not source.is_file():
        logger.error(f"Source file not found: {source}")
        return 1

    try:
        disks = get_disks(args, config, logger)
    except ValueError:
        return 1

    disk_name = args.disk_name or config.disk
    try:
        spec = default_registry(config.quality, logger).resolve(args.preset)
        manager = ConversionManager(ImageConverter(disks, config, logger), logger)
        manifest = manager.process(source, spec.to_dict(), disk_name, args.directory, preset=args.preset)
    except DarkroomError as e:
        logger.error(f"Conversion failed: {e}")
        return 1
    finally:
        disks.close()

    print(json.dumps(manifest, indent=2))
    return 0


def cmd_presets(args: argparse.Namespace) -> int:
    """Execute presets command: list registered presets."""
    logger = setup_logging(args.verbose)
    config = DarkroomConfig.from_env()
    registry: PresetRegistry = default_registry(config.quality, logger)

    if args.json:
        document = {preset_id: registry.resolve(preset_id).to_dict() for preset_id in registry.ids}
        print(json.dumps(document, indent=2))
        return 0

    for preset_id in registry.ids:
        print(preset_id)
        for name, conversion in registry.resolve(preset_id).to_dict().items():
            size = f"{conversion.get('width') or 'auto'}x{conversion.get('height') or 'auto'}"
            print(f"  {name:<12} {size:<12} {conversion['fit']:<8} q{conversion['quality']}")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='darkroom',
        description='Image conversions and regeneration',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  darkroom presets
  darkroom convert photo.jpg --preset hero --directory blocks/hero --local-root ./storage
  darkroom regenerate --records records.json --all --dry-run --local-root ./storage
  darkroom regenerate --records records.json --model Article --id 12 --backup --force

Storage options:
  Use --local-root for local filesystem, or S3 environment variables for S3.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Regenerate command
    regen_parser = subparsers.add_parser('regenerate', help='Regenerate conversions of stored images')
    regen_parser.add_argument('-r', '--records', required=True, help='JSON records file')

    scope = regen_parser.add_argument_group('Scope')
    scope.add_argument('--all', action='store_true', help='Regenerate all images')
    scope.add_argument('--models', action='store_true', help='Regenerate images of all models')
    scope.add_argument('--blocks', action='store_true', help='Regenerate images of all blocks')
    scope.add_argument('--seo', action='store_true', help='Regenerate SEO images')
    scope.add_argument('--model', help='Only this model type')
    scope.add_argument('--block-type', help='Only this block type')

    filters = regen_parser.add_argument_group('Filters')
    filters.add_argument('--field', help='Only this field')
    filters.add_argument('--id', help='Only this record, block or SEO id')
    filters.add_argument('--conversion', help='Only presets containing this text')
    filters.add_argument('--disk', help='Only images stored on this disk')

    regen_parser.add_argument('-n', '--dry-run', action='store_true', help='Show what would be done')
    regen_parser.add_argument('-f', '--force', action='store_true', help='Skip the confirmation prompt')
    regen_parser.add_argument('--backup', action='store_true', help='Back up current conversions first')
    regen_parser.add_argument('--no-keep-on-fail', action='store_true',
                              help='Accepted for compatibility; current conversions are always kept on failure')
    regen_parser.add_argument('-q', '--quiet', action='store_true', help='Only show errors')
    regen_parser.add_argument('--json', action='store_true', help='Print results as JSON')
    regen_parser.add_argument('-w', '--workers', type=int, default=1, help='Images processed concurrently')
    regen_parser.add_argument('-v', '--verbose', action='store_true', help='Show each image and failure details')
    add_storage_arguments(regen_parser)

    # Convert command
    convert_parser = subparsers.add_parser('convert', help='Store an image and generate its conversions')
    convert_parser.add_argument('source', help='Image file to store')
    convert_parser.add_argument('-p', '--preset', required=True, help='Preset id (see: darkroom presets)')
    convert_parser.add_argument('-d', '--directory', required=True, help='Target directory on the disk')
    convert_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    add_storage_arguments(convert_parser)

    # Presets command
    presets_parser = subparsers.add_parser('presets', help='List registered presets')
    presets_parser.add_argument('--json', action='store_true', help='Print presets as JSON')
    presets_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'regenerate':
        return cmd_regenerate(parsed_args)
    elif parsed_args.command == 'convert':
        return cmd_convert(parsed_args)
    elif parsed_args.command == 'presets':
        return cmd_presets(parsed_args)

    return 1
