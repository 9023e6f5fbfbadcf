"""
Command line entry point
"""

import argparse
import asyncio
import logging
import sys

from keysync.config import load_settings
from keysync.services.extractor import run_extractor
from keysync.utils.validators import ExtractorError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='keysync-extract',
        description='Extract translation keys and update locale catalogs'
    )
    parser.add_argument('--env-file', help='read settings from this .env file in addition to the environment')
    parser.add_argument('--dry-run', action='store_true', help='report changes without writing files')
    parser.add_argument('--sync-primary', action='store_true',
                        help='overwrite primary language values with explicit defaults from source')
    parser.add_argument('--sync-all', action='store_true',
                        help='reset secondary language values to the configured default')
    return parser


def main(argv=None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.env_file)
    except (ValueError, ExtractorError) as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Invalid configuration: {e}")
        return 1

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    try:
        updated = asyncio.run(run_extractor(
            settings,
            is_dry_run=args.dry_run,
            sync_primary_with_defaults=args.sync_primary,
            sync_all=args.sync_all
        ))
    except ExtractorError as e:
        logger.error(f"Extraction failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Extraction stopped by user")
        return 1

    if updated and args.dry_run:
        logger.info("Dry run finished, no files were written")
    return 0


if __name__ == '__main__':
    sys.exit(main())
