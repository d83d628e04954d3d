"""
Entrypoint: python -m ksense_healthcare_assessment [--dry-run]
"""

import argparse
import logging
import sys

from .api import ApiClient, ApiError
from .assessment import run_assessment
from .config import LOG_LEVELS, ConfigError, load_settings

logger = logging.getLogger("ksense_healthcare_assessment")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="ksense-assessment",
        description="Score every patient from the assessment API and submit the results.",
    )
    parser.add_argument("--dry-run", action="store_true", help="score patients but do not submit")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="overrides LOG_LEVEL (default INFO)",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Fatal error: {e}")
        return 1

    logging.basicConfig(
        level=args.log_level or settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = ApiClient.from_settings(settings)
    try:
        run_assessment(client, dry_run=args.dry_run)
    except ApiError as e:
        logger.error(f"Fatal error: {e}")
        return 1
    finally:
        client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
