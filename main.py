#!/usr/bin/env python3
"""
covidmex - Command Line Runner.

This script downloads one COVID-19 case report and prints a summary:
1. Validates the requested scope / source / case type / date
2. Locates the report file (stepping back a day when it is not published yet)
3. Downloads and parses it, cleaning it unless --raw is given
4. Prints the table head, optionally saving it as CSV
"""
import argparse
import sys

from covidmex import __version__
from covidmex.config.settings import settings
from covidmex.core.errors import CovidMexError, InvalidRequestError
from covidmex.utils.logging import get_logger
from covidmex.workflows.get_data import available_sources, fetch_report

logger = get_logger("main")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Download COVID-19 case reports for Mexico and the world.")
    parser.add_argument("--scope", default="mexico", help="'mexico' or 'worldwide' (default: mexico)")
    parser.add_argument("--source", default=None, help="ssa, serendipia, guzmart, ecdc or jhu (default: per scope)")
    parser.add_argument("--type", dest="case_type", default="confirmed", help="'confirmed' or 'suspect'")
    parser.add_argument("--date", default="latest", help="'latest' or day/month/year (default: latest)")
    parser.add_argument("--raw", action="store_true", help="Return the table as published, without cleaning")
    parser.add_argument("--output", default=None, help="Save the table to this CSV file")
    parser.add_argument("--list-sources", action="store_true", help="List available sources and exit")
    return parser.parse_args(argv)


def print_banner():
    """Print startup banner."""
    print("\n" + "=" * 60)
    print(f"   covidmex {__version__} - COVID-19 Case Reports")
    print("=" * 60)


def print_config(args: argparse.Namespace):
    """Print current configuration."""
    logger.info("Configuration:")
    logger.info(f"  Scope: {args.scope}")
    logger.info(f"  Source: {args.source or 'default'}")
    logger.info(f"  Case Type: {args.case_type}")
    logger.info(f"  Date: {args.date}")
    logger.info(f"  Normalize: {not args.raw}")
    logger.info(f"  Max Attempts: {settings.max_attempts}")
    logger.info(f"  Scratch Dir: {settings.scratch_path or 'system temp dir'}")


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    if args.list_sources:
        print(available_sources().to_string(index=False))
        return 0

    print_banner()
    print_config(args)

    try:
        df = fetch_report(
            scope=args.scope,
            case_type=args.case_type,
            date=args.date,
            source=args.source,
            normalize=not args.raw,
        )
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user")
        print("\n\n⚠️  Interrupted by user")
        return 130
    except InvalidRequestError as e:
        logger.error(f"Invalid request: {e}")
        print(f"\n❌ Invalid request: {e}")
        return 2
    except CovidMexError as e:
        logger.error(f"Retrieval failed: {e}")
        print(f"\n❌ Error: {e}")
        return 1

    print("\n" + "=" * 60)
    print("   DOWNLOAD COMPLETE")
    print("=" * 60)
    print(f"\n📄 Source: {df.attrs.get('source')} ({df.attrs.get('url')})")
    print(f"   Report date: {df.attrs.get('report_date') or 'latest'}")
    print(f"   Rows: {len(df)}  Columns: {len(df.columns)}\n")
    print(df.head().to_string())

    if args.output:
        df.to_csv(args.output, index=False)
        logger.info(f"Table saved: {args.output}")

    return 0


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
