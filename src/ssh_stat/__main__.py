"""
Entry point for the ssh-stat CLI.

Usage:
    ssh-stat                          Report on /var/log/auth.log
    ssh-stat -i auth.log --after 1d   Only logins from the last day
    ssh-stat --failed --ips           Bare list of IPs with failed logins
    ssh-stat --json                   JSON output
    ssh-stat --help                   Show help message
    ssh-stat --version                Show version and exit

Exit Codes:
    0 - Success
    1 - Configuration error (invalid flag, order or duration)
    2 - Input error (log file missing or unreadable)
"""

from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from ssh_stat.config import SshStatSettings
    from ssh_stat.models import LoginEvent

from ssh_stat import __version__

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_INPUT_ERROR = 2

# argparse dest -> settings field
_OVERRIDE_FIELDS = {
    "input": "input_path",
    "after": "after",
    "days": "days",
    "hours": "hours",
    "mins": "mins",
    "secs": "secs",
    "ips": "ips",
    "accepted": "accepted",
    "failed": "failed",
    "json": "json_output",
    "colors": "colors",
    "cpu": "cpus",
    "order": "order",
    "read_mode": "read_mode",
    "log_level": "log_level",
    "log_format": "log_format",
}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Flags left off the command line are absent from the namespace so the
    config file and environment can supply them.
    """
    parser = argparse.ArgumentParser(
        prog="ssh-stat",
        description="Get stats on ssh sessions",
        argument_default=argparse.SUPPRESS,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0   Success
  1   Configuration error
  2   Input error (cannot read the log file)

Environment Variables:
  CONFIG_PATH           Path to YAML configuration file
  SSHSTAT_INPUT_PATH    Log file to parse
  SSHSTAT_AFTER         Lookback duration, e.g. 4d2h5m3s
  SSHSTAT_ORDER         attemptsAsc, attemptsDesc, chronoAsc, chronoDesc
  SSHSTAT_CPUS          CPUs to size the worker pool for
  SSHSTAT_LOG_LEVEL     Logging level: DEBUG, INFO, WARNING, ERROR
  SSHSTAT_LOG_FORMAT    Log format: json or text
  SSHSTAT_COLORS        Color the table (only when stdout is a terminal)

Examples:
  # Failed logins from the last 4 days, most attempts first
  ssh-stat -i /var/log/auth.log --after 4d --failed

  # Accepted logins, oldest first
  ssh-stat --accepted --order chronoAsc
""",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("-i", "--input", help="Parse this file (default: /var/log/auth.log)")
    parser.add_argument(
        "-a", "--after", help="Start parsing from {n} duration ago, Ex: 4d2h5m3s"
    )
    parser.add_argument("-d", "--days", type=int, help="Start parsing at {n} days ago")
    parser.add_argument("--hours", type=int, help="Start parsing at {n} hours ago")
    parser.add_argument("-m", "--mins", type=int, help="Start parsing at {n} minutes ago")
    parser.add_argument("-s", "--secs", type=int, help="Start parsing at {n} seconds ago")
    parser.add_argument("--ips", action="store_true", help="Only display ip addresses")
    parser.add_argument(
        "--accepted", action="store_true", help="Only display accepted login results"
    )
    parser.add_argument("--failed", action="store_true", help="Only display failed login results")
    parser.add_argument("--json", action="store_true", help="Display results as JSON")
    parser.add_argument(
        "--colors", action="store_true", help="Display output with colored text"
    )
    parser.add_argument("--cpu", type=int, help="Set max cpu usage (0 = all)")
    parser.add_argument(
        "--order",
        help="Order results, (attemptsAsc, attemptsDesc, chronoAsc, chronoDesc)",
    )
    parser.add_argument(
        "--scan",
        dest="read_mode",
        action="store_const",
        const="scan",
        help="Scan the log line by line instead of reading it whole",
    )
    parser.add_argument("--config", help="Path to YAML configuration file")
    parser.add_argument("--log-level", help="Logging level: DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-format", choices=["json", "text"], help="Log output format")
    return parser.parse_args(argv)


def build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Map parsed flags onto settings field names."""
    given = vars(args)
    return {field: given[dest] for dest, field in _OVERRIDE_FIELDS.items() if dest in given}


def run_stat(config: "SshStatSettings") -> Tuple[List["LoginEvent"], List["LoginEvent"]]:
    """Run the parse/aggregate pipeline for one log file.

    Returns:
        Tuple of (failed, accepted) buckets, sorted per config.order_by

    Raises:
        ConfigurationError: If the lookback window is invalid
        InputReadError: If the log file cannot be read
    """
    from ssh_stat.analysis import Aggregator
    from ssh_stat.logging import get_logger
    from ssh_stat.logs import Dispatcher, iter_lines, read_lines
    from ssh_stat.utils.durations import resolve_threshold

    log = get_logger()

    threshold = resolve_threshold(config.duration)
    if config.read_mode == "scan":
        lines = iter_lines(config.input_path)
    else:
        lines = read_lines(config.input_path)

    aggregator = Aggregator()
    dispatcher = Dispatcher(
        concurrency=config.concurrency,
        threshold=threshold,
        aggregator=aggregator,
    )
    dispatcher.run(lines)

    log.info("aggregation_complete", input_path=config.input_path, **aggregator.stats)
    return aggregator.finalize(config.order_by)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for ssh-stat.

    Returns:
        Exit code (0=success, 1=config error, 2=input error)
    """
    args = parse_args(argv)

    # Import here so --help and --version work without loading dependencies
    from ssh_stat.config import ConfigurationError, load_config
    from ssh_stat.exceptions import InputReadError
    from ssh_stat.logging import configure_logging, get_logger
    from ssh_stat.reports import ReportBuilder

    # Load configuration; order and duration are validated here, before any parsing
    try:
        config = load_config(
            config_path=getattr(args, "config", None),
            overrides=build_overrides(args),
        )
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(log_format=config.log_format, log_level=config.log_level)
    log = get_logger()

    try:
        failed, accepted = run_stat(config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except InputReadError as e:
        log.error("input_read_failed", path=e.path, error=e.message)
        print(f"\nInput error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    builder = ReportBuilder(
        show_accepted=config.show_accepted,
        show_failed=config.show_failed,
        colors=config.colors and sys.stdout.isatty(),
    )
    sys.stdout.write(builder.render(config.output_format, failed, accepted))
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
