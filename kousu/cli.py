"""
Command-line interface for the MA-EYES work-log tool.

This module provides the CLI using argparse and orchestrates the get, put
and import-kinmu operations.
"""

import argparse
import os
import sys
from pathlib import Path

from .config import Config
from .errors import KousuError
from .logging_utils import setup_logging, get_logger, log_section, log_error, log_step, log_success
from .ma_eyes import run_get_operation, run_put_operation, run_import_kinmu_operation
from .models import Document
from .month_utils import MonthParseError, format_month, parse_month, previous_month
from .network_utils import check_connectivity, format_connectivity_error, is_vpn_proxy_error
from .reconciler import format_hours
from .schema import load_document, write_document

# Legacy option -> (environment variable, version that removed it, replacement)
LEGACY_OPTIONS = {
    'out_csv': ('--out-csv', 'KOUSU_OUT_CSV', '0.2.0', 'CSV output is no longer supported; use: kousu get <outFile>'),
    'out_json': ('--out-json', 'KOUSU_OUT_JSON', '0.3.0', 'pass the output path as an argument: kousu get <outFile>'),
    'in_csv': ('--in-csv', 'KOUSU_IN_CSV', '0.2.0', 'CSV input is no longer supported; use: kousu put <inFile>'),
    'in_json': ('--in-json', 'KOUSU_IN_JSON', '0.3.0', 'pass the input path as an argument: kousu put <inFile>'),
}


def _add_legacy_option(parser: argparse.ArgumentParser, dest: str):
    flag, env, _, _ = LEGACY_OPTIONS[dest]
    parser.add_argument(
        flag,
        dest=dest,
        metavar='PATH',
        default=os.environ.get(env),
        help=argparse.SUPPRESS
    )


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Environment variables are read when the parser is created.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog='kousu',
        description='Read and write the MA-EYES work log (工数実績)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Read last month into a JSON file
  kousu --ma-url https://example.com/maeyes/ --ma-user USER --ma-pass PASS get 2006-01.json

  # Read a given month
  kousu --month 2006-01 get 2006-01.json

  # Validate a file and show what would be written
  kousu put 2006-01.json --dry-run

  # Write a file back into MA-EYES
  kousu --month 2006-01 put 2006-01.json

  # Import attendance into every week and save
  kousu --month 2006-01 import-kinmu

Environment variables:
  KOUSU_MA_URL, KOUSU_MA_USER, KOUSU_MA_PASS, KOUSU_MONTH
        """
    )

    parser.add_argument(
        '--ma-url',
        metavar='URL',
        default=os.environ.get('KOUSU_MA_URL'),
        help='URL of the MA-EYES login page (env: KOUSU_MA_URL)'
    )

    parser.add_argument(
        '--ma-user',
        metavar='USER',
        default=os.environ.get('KOUSU_MA_USER'),
        help='MA-EYES user code (env: KOUSU_MA_USER)'
    )

    parser.add_argument(
        '--ma-pass',
        metavar='PASS',
        default=os.environ.get('KOUSU_MA_PASS'),
        help='MA-EYES password (env: KOUSU_MA_PASS)'
    )

    # Parsed by validate_args
    parser.add_argument(
        '--month',
        metavar='YYYY-MM',
        default=os.environ.get('KOUSU_MONTH') or format_month(*previous_month()),
        help='Month to process, e.g. 2006-01 (env: KOUSU_MONTH; default: previous month)'
    )

    parser.add_argument(
        '--ignore-https',
        action='store_true',
        help='Ignore HTTPS certificate errors'
    )

    parser.add_argument(
        '--skip-preflight',
        action='store_true',
        help='Skip the network connectivity check before opening the browser'
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        '--verbose',
        '-v',
        action='count',
        default=0,
        help='Enable verbose logging (debug level)'
    )
    verbosity.add_argument(
        '--quiet',
        '-q',
        action='store_true',
        help='Only log errors'
    )

    # Developer options
    parser.add_argument('--z-connect-url', metavar='URL', help=argparse.SUPPRESS)
    parser.add_argument('--z-cookie-load', metavar='PATH', help=argparse.SUPPRESS)
    parser.add_argument('--z-cookie-save', metavar='PATH', help=argparse.SUPPRESS)
    parser.add_argument('--z-headless', action='store_true', help=argparse.SUPPRESS)
    parser.add_argument(
        '--no-z-handle-sigint',
        dest='z_handle_sigint',
        action='store_false',
        help=argparse.SUPPRESS
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    get_parser = subparsers.add_parser(
        'get',
        help='Read the work log of the month into a JSON file'
    )
    get_parser.add_argument(
        'file',
        nargs='?',
        metavar='outFile',
        help='Path of the JSON file to write'
    )
    _add_legacy_option(get_parser, 'out_csv')
    _add_legacy_option(get_parser, 'out_json')

    put_parser = subparsers.add_parser(
        'put',
        help='Write the hours of a JSON file into the work log of the month'
    )
    put_parser.add_argument(
        'file',
        nargs='?',
        metavar='inFile',
        help='Path of the JSON file to read'
    )
    put_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Validate the file and show the plan without opening a browser'
    )
    _add_legacy_option(put_parser, 'in_csv')
    _add_legacy_option(put_parser, 'in_json')

    subparsers.add_parser(
        'import-kinmu',
        help='Press 勤務時間取込 (import attendance) and save for every week of the month'
    )

    return parser


def validate_args(args: argparse.Namespace) -> bool:
    """
    Validate command-line arguments.

    Args:
        args: Parsed arguments

    Returns:
        True if valid, False otherwise
    """
    logger = get_logger()

    for dest, (flag, env, version, replacement) in LEGACY_OPTIONS.items():
        if getattr(args, dest, None) is not None:
            log_error(f"{flag} ({env}) was removed in {version}; {replacement}", logger)
            return False

    # put --dry-run never opens the month
    if not getattr(args, 'dry_run', False):
        try:
            parse_month(args.month)
        except MonthParseError as e:
            log_error(f"Invalid month: {e}", logger)
            return False

    if args.command in ('get', 'put') and not args.file:
        name = 'outFile' if args.command == 'get' else 'inFile'
        log_error(f"Missing argument: kousu {args.command} <{name}>", logger)
        return False

    if args.command == 'put' and not Path(args.file).exists():
        log_error(f"JSON file not found: {args.file}", logger)
        return False

    if args.z_cookie_load and args.z_cookie_save:
        log_error("Cannot use --z-cookie-load with --z-cookie-save", logger)
        return False

    return True


def build_config(args: argparse.Namespace) -> Config:
    """
    Build the immutable run configuration from parsed arguments.

    Args:
        args: Parsed arguments

    Returns:
        Config instance
    """
    year, month = parse_month(args.month)
    return Config(
        ma_url=args.ma_url or '',
        ma_user=args.ma_user or '',
        ma_pass=args.ma_pass or '',
        year=year,
        month=month,
        headless=args.z_headless,
        ignore_https=args.ignore_https,
        handle_sigint=args.z_handle_sigint,
        connect_url=args.z_connect_url,
        cookie_load=args.z_cookie_load,
        cookie_save=args.z_cookie_save,
    )


def run_preflight(config: Config) -> bool:
    """
    Check that MA-EYES is reachable before opening a browser.

    Returns:
        True if reachable, False otherwise
    """
    logger = get_logger()
    log_step(f"Checking connectivity to {config.ma_url}...", logger)

    success, error = check_connectivity(config.ma_url, ignore_https=config.ignore_https)
    if success:
        logger.debug("Connectivity check passed")
        return True

    message = format_connectivity_error(config.ma_url, error, is_vpn_proxy_error(error))
    for line in message.splitlines():
        logger.error(line)
    return False


def prepare_config(args: argparse.Namespace):
    """
    Build and validate the configuration and run the preflight check.

    Returns:
        Config, or None if the run cannot start
    """
    logger = get_logger()
    config = build_config(args)

    try:
        config.validate()
    except ValueError as e:
        log_error(f"Configuration error: {e}", logger)
        return None

    if args.skip_preflight:
        logger.debug("Connectivity check skipped")
    elif not run_preflight(config):
        return None

    return config


def format_plan(document: Document) -> str:
    """
    Format the per-day plan printed by ``put --dry-run``.

    Returns:
        One line per work day
    """
    lines = []
    for work in document.works:
        hours = ' '.join(f"{project_id}={format_hours(value)}" for project_id, value in work.hours.items())
        lines.append(f"{work.date}\t{work.begin}-{work.end}\tsagyou={format_hours(work.sagyou)}\t{hours}".rstrip())
    return "\n".join(lines)


def _run(operation, *operation_args):
    """
    Run an operation and map its failures to exit codes.

    Returns:
        Tuple of (exit code or None on success, operation result)
    """
    logger = get_logger()
    try:
        return None, operation(*operation_args)

    except KeyboardInterrupt:
        logger.info("")
        logger.warning("Operation cancelled by user")
        return 130, None

    except KousuError as e:
        logger.info("")
        log_error(str(e), logger)
        return 1, None

    except Exception as e:
        logger.info("")
        log_error(f"Operation failed: {e}", logger)
        raise


def cmd_get(args: argparse.Namespace) -> int:
    """
    Execute the get command.

    The output file is written only after the whole month was read.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    logger = get_logger()

    config = prepare_config(args)
    if config is None:
        return 1

    code, document = _run(run_get_operation, config)
    if code is not None:
        return code
    if document is None:
        return 0

    write_document(document, args.file)
    log_success(f"Wrote {len(document.works)} day(s) to {args.file}", logger)
    return 0


def cmd_put(args: argparse.Namespace) -> int:
    """
    Execute the put command.

    The file is validated before any browser work.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    logger = get_logger()

    log_section("Loading JSON Data", logger)
    code, document = _run(load_document, args.file)
    if code is not None:
        return code
    logger.info(
        f"Loaded {len(document.works)} day(s), {len(document.projects)} project(s) from {args.file}"
    )

    if args.dry_run:
        print(format_plan(document))
        log_section("Dry Run Complete", logger)
        logger.info("No browser operations performed.")
        logger.info("Run without --dry-run to write the work log.")
        return 0

    config = prepare_config(args)
    if config is None:
        return 1

    code, summary = _run(run_put_operation, config, document)
    if code is not None:
        return code
    if summary is None:
        return 0

    logger.info(summary.format_summary())
    log_success("Operation completed successfully", logger)
    return 0


def cmd_import_kinmu(args: argparse.Namespace) -> int:
    """
    Execute the import-kinmu command.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    logger = get_logger()

    config = prepare_config(args)
    if config is None:
        return 1

    code, weeks = _run(run_import_kinmu_operation, config)
    if code is not None:
        return code
    if weeks is None:
        return 0

    log_success(f"Imported attendance for {weeks} week(s)", logger)
    return 0


COMMANDS = {
    'get': cmd_get,
    'put': cmd_put,
    'import-kinmu': cmd_import_kinmu,
}


def main(argv=None):
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, quiet=args.quiet)

    logger = get_logger()

    logger.debug(f"kousu PID {os.getpid()}")

    if not args.command:
        parser.print_help()
        return 1

    if not validate_args(args):
        return 1

    return COMMANDS[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
