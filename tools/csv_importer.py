"""Load the rows of a CSV file into a document store index.

The first row is the header. Every following row becomes one document
whose field names are the lower-cased header names with spaces replaced by
dashes.

Usage:
  import-csv --index INDEX --type TYPE [--host HOST] [--port PORT]
             [--columns "Col A,Col B"] FILE
"""

from __future__ import annotations

import argparse
import csv
import logging
import sys
from typing import Optional

from config import ES_HOST, ES_PORT, LOG_LEVEL
from errors import ConfigError
from store_client import StoreClient
from store_models import ClusterEndpoint, ImportSummary

log = logging.getLogger(__name__)


def column_to_field(name: str) -> str:
    """Map a CSV column name to a document field name."""
    return name.lower().replace(" ", "-")


def build_column_map(
    header: list[str],
    columns: Optional[list[str]] = None,
) -> list[Optional[str]]:
    """Return the field name for each header position, None for skipped columns.

    `columns` is an allow-list matched case-insensitively; None keeps all.
    """
    allowed = None
    if columns is not None:
        allowed = {c.strip().lower() for c in columns}
    return [
        column_to_field(col) if allowed is None or col.lower() in allowed else None
        for col in header
    ]


def row_to_document(row: list[str], column_map: list[Optional[str]]) -> dict[str, str]:
    return {field: value for field, value in zip(column_map, row) if field is not None}


def import_file(
    client: StoreClient,
    path: str,
    doc_type: str,
    columns: Optional[list[str]] = None,
) -> ImportSummary:
    """Stream a CSV file into the client's index, one create per row."""
    summary = ImportSummary()
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header is None:
            log.warning("%s is empty", path)
            return summary
        column_map = build_column_map(header, columns)

        for row in reader:
            result = client.create(doc_type, row_to_document(row, column_map))
            if result.ok:
                summary.created += 1
            else:
                summary.failures += 1
                log.error("%s %s", result.status_code, result.message)
            summary.lines += 1
    return summary


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise ConfigError(message)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = _ArgumentParser(prog="import-csv", description="Import a CSV file as documents")
    parser.add_argument("--host", default=ES_HOST)
    parser.add_argument("--port", type=int, default=ES_PORT)
    parser.add_argument("--columns", default=None, help="Comma separated list of columns to import")
    parser.add_argument("--index")
    parser.add_argument("--type")
    parser.add_argument("file", nargs="?")
    args = parser.parse_args(argv)

    if not args.index:
        raise ConfigError("missing argument: --index")
    if not args.type:
        raise ConfigError("missing argument: --type")
    if not args.file:
        raise ConfigError("Missing argument: file")
    return args


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(stream=sys.stderr, level=LOG_LEVEL, format="%(levelname)s: %(message)s")
    try:
        args = parse_args(argv)
        endpoint = ClusterEndpoint(host=args.host, port=args.port, index=args.index)
    except ConfigError as e:
        sys.stderr.write(f"{e}\n")
        return 1
    except ValueError as e:
        sys.stderr.write(f"Invalid endpoint: {e}\n")
        return 1

    columns = args.columns.split(",") if args.columns else None
    try:
        with StoreClient(endpoint) as client:
            summary = import_file(client, args.file, args.type, columns)
    except (OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"Cannot read {args.file}: {e}\n")
        return 1

    print(summary.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
