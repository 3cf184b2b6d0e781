"""Copy a Kibana 4 dashboard with its visualizations and saved searches
from one cluster to another.

Does not check that either cluster actually runs Kibana 4, and does not copy
the data index being visualized.

Usage:
  copy-kibana-dashboard --dashboard ID [--from-host HOST] [--to-host HOST] ...
"""

from __future__ import annotations

import argparse
import logging
import sys

from config import ES_HOST, ES_PORT, KIBANA_INDEX, LOG_LEVEL
from copier import DashboardCopier
from errors import ConfigError, FatalFetchError
from store_models import ClusterEndpoint

USAGE = f"""\
Usage:
--dashboard ID
--from-host HOST (default: {ES_HOST})
--from-port PORT (default: {ES_PORT})
--from-index INDEX (default: {KIBANA_INDEX})
--to-host HOST (default: {ES_HOST})
--to-port PORT (default: {ES_PORT})
--to-index INDEX (default: {KIBANA_INDEX})
--to-saved-search-index INDEX (default: don't change)
    change index for saved search
--verbose
    print object keys as they are copied
--quiet

At least one of the --to or --from options must differ
"""


class _ArgumentParser(argparse.ArgumentParser):
    """argparse parser that raises ConfigError instead of exiting."""

    def error(self, message):
        raise ConfigError(message)


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog="copy-kibana-dashboard", add_help=False)
    parser.add_argument("--help", "-h", action="store_true")
    parser.add_argument("--dashboard", "-d")
    parser.add_argument("--from-host", default=ES_HOST)
    parser.add_argument("--from-port", type=int, default=ES_PORT)
    parser.add_argument("--from-index", default=KIBANA_INDEX)
    parser.add_argument("--to-host", default=ES_HOST)
    parser.add_argument("--to-port", type=int, default=ES_PORT)
    parser.add_argument("--to-index", default=KIBANA_INDEX)
    parser.add_argument("--to-saved-search-index", default=None)
    parser.add_argument("--verbose", dest="verbose", action="store_true", default=None)
    parser.add_argument("--quiet", dest="verbose", action="store_false")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse and validate arguments. Raises ConfigError on bad input."""
    args = _build_parser().parse_args(argv)
    if args.help:
        return args
    if not args.dashboard:
        raise ConfigError("Missing argument --dashboard")
    return args


def _endpoints(args: argparse.Namespace) -> tuple[ClusterEndpoint, ClusterEndpoint]:
    try:
        source = ClusterEndpoint(host=args.from_host, port=args.from_port, index=args.from_index)
        destination = ClusterEndpoint(host=args.to_host, port=args.to_port, index=args.to_index)
    except ValueError as e:
        raise ConfigError(f"Invalid cluster endpoint: {e}") from e
    return source, destination


def _configure_logging(verbose: bool | None) -> None:
    if verbose is None:
        level = LOG_LEVEL
    else:
        level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(stream=sys.stderr, level=level, format="%(levelname)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    try:
        args = parse_args(argv)
        if args.help:
            sys.stderr.write(USAGE)
            return 0
        source, destination = _endpoints(args)
        verbose = args.verbose is not False
        _configure_logging(args.verbose)
        copier = DashboardCopier(
            source,
            destination,
            saved_search_index=args.to_saved_search_index,
            verbose=verbose,
        )
        report = copier.copy(args.dashboard)
    except ConfigError as e:
        sys.stderr.write(f"{e}\n")
        sys.stderr.write(USAGE)
        return 1
    except FatalFetchError as e:
        sys.stderr.write(f"{e}\n")
        return 1

    if not report.ok:
        sys.stderr.write(f"{report.summary()}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
