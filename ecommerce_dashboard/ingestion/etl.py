"""
One-shot CSV ETL

Rebuilds the store from the source CSV files: drops and recreates every
table, then loads users, orders, products and order items in that order.

Usage:
    python -m ecommerce_dashboard.ingestion.etl
    python -m ecommerce_dashboard.ingestion.etl --data-dir ./archive --row-limit 0
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

import structlog

from ecommerce_dashboard.config import get_settings
from ecommerce_dashboard.database.connection import Database
from ecommerce_dashboard.database.models import TABLE_LOAD_ORDER
from ecommerce_dashboard.ingestion.csv_loader import CsvTableLoader, LoadError, LoadResult

logger = structlog.get_logger(__name__)


async def run_etl(
    database: Database,
    sources: Mapping[str, Union[str, Path]],
    row_cap: Optional[int] = None,
    delimiter: str = ",",
) -> List[LoadResult]:
    """
    Recreate the schema and load every source file.

    Args:
        database: Initialized store handle
        sources: Source file per table name; every schema table is required
        row_cap: Maximum rows read per file, None for all
        delimiter: CSV field delimiter

    Returns:
        One LoadResult per table, in load order

    Raises:
        LoadError: A file could not be read; later files are not loaded
    """
    missing = [name for name in TABLE_LOAD_ORDER if name not in sources]
    if missing:
        raise ValueError(f"No source file configured for tables: {missing}")

    logger.info("Starting ETL process", row_cap=row_cap, tables=list(TABLE_LOAD_ORDER))

    await database.recreate_schema()

    loader = CsvTableLoader(database, delimiter=delimiter)
    results = []
    for table_name in TABLE_LOAD_ORDER:
        result = await loader.load(sources[table_name], table_name, row_cap=row_cap)
        results.append(result)

    logger.info(
        "All data loaded successfully",
        rows_loaded=sum(r.rows_loaded for r in results),
        rows_failed=sum(r.rows_failed for r in results),
    )
    return results


async def _run(data_dir: Optional[str], db_path: Optional[str], row_cap: Optional[int]) -> Dict[str, int]:
    settings = get_settings()
    if db_path:
        database = Database(f"sqlite+aiosqlite:///{db_path}", echo=settings.database.echo)
    else:
        database = Database.from_settings()

    await database.init()
    try:
        results = await run_etl(
            database,
            settings.etl.sources(data_dir),
            row_cap=row_cap,
            delimiter=settings.etl.delimiter,
        )
    finally:
        await database.close()

    return {r.target_table: r.rows_loaded for r in results}


def _row_limit(value: str) -> int:
    """argparse type for --row-limit: a non-negative integer"""
    try:
        limit = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid row limit: {value!r}")
    if limit < 0:
        raise argparse.ArgumentTypeError(f"row limit must be 0 or more, got {limit}")
    return limit


def main(
argv: Optional[List[str]] = None) -> int:
    """Command line entry point"""
    from ecommerce_dashboard.config.logging import configure_logging

    settings = get_settings()

    parser = argparse.ArgumentParser(description="Load the dashboard CSV files into SQLite")
    parser.add_argument(
        "--data-dir",
        default=None,
        help=f"Directory holding the CSV files (default: {settings.etl.data_dir})"
    )
    parser.add_argument(
        "--db-path",
        default=None,
        help=f"SQLite database file (default: {settings.database.path})"
    )
    parser.add_argument(
        "--row-limit",
        type=_row_limit,
        default=settings.etl.row_limit,
        help="Rows loaded per file, 0 for no limit (default: %(default)s)"
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL"
    )
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    row_cap = args.row_limit or None
    try:
        counts = asyncio.run(_run(args.data_dir, args.db_path, row_cap))
    except LoadError as e:
        logger.error(
            "A critical error occurred during the ETL process",
            table=e.table_name,
            file=e.source_path,
            reason=e.reason,
        )
        return 1

    logger.info("ETL finished", **counts)
    return 0


if __name__ == "__main__":
    sys.exit(main())
