"""
CSV Table Loader

Streams rows from a delimited file into one table of the store.
Supports:
- Insert column set taken from the file header, checked against the table
- Optional row cap, pushed down into the reader so the rest of the file is
  never read
- One transaction per file
- Best-effort rows: a failing insert or a row without a key is logged and
  skipped
"""

import asyncio
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

import polars as pl
import structlog
from pydantic import BaseModel
from sqlalchemy import column, insert, table
from sqlalchemy.exc import SQLAlchemyError

from ecommerce_dashboard.database.connection import Database
from ecommerce_dashboard.database.models import Base

logger = structlog.get_logger(__name__)


class LoadError(Exception):
    """A source file could not be read; its transaction was rolled back."""

    def __init__(self, source_path: Union[str, Path], table_name: str, reason: str):
        self.source_path = str(source_path)
        self.table_name = table_name
        self.reason = reason
        super().__init__(f"Failed to load {self.source_path} into {table_name}: {reason}")


class LoadStatus(str, Enum):
    """File load status"""
    COMPLETED = "completed"
    PARTIAL = "partial"


class LoadResult(BaseModel):
    """Result of loading one file"""
    source_path: str
    target_table: str
    status: LoadStatus
    rows_read: int = 0
    rows_loaded: int = 0
    rows_failed: int = 0
    row_cap: Optional[int] = None
    capped: bool = False
    started_at: datetime
    completed_at: Optional[datetime] = None
    load_duration_seconds: float = 0


class CsvTableLoader:
    """
    Loads CSV files into the tables of the schema.

    Column names come from the header verbatim and must all exist in the
    target table, key included. There is no per-row schema validation: a
    short row inserts NULL for its missing trailing fields. A row whose key
    field is empty is skipped rather than given a generated key.

    Example:
        loader = CsvTableLoader(database, delimiter=",")
        result = await loader.load("archive/users.csv", "users", row_cap=5000)
    """

    def __init__(self, database: Database, delimiter: str = ","):
        self.database = database
        self.delimiter = delimiter

    def _read_csv(self, source_path: Path, row_cap: Optional[int]) -> pl.DataFrame:
        """Read every column as text; the store's column affinity converts them"""
        return pl.read_csv(
            source_path,
            separator=self.delimiter,
            has_header=True,
            infer_schema_length=0,
            null_values=[""],
            n_rows=row_cap,
        )

    @staticmethod
    def _check_table(table_name: str) -> None:
        if table_name not in Base.metadata.tables:
            raise ValueError(
                f"Unknown target table: {table_name!r} "
                f"(expected one of {sorted(Base.metadata.tables)})"
            )

    @staticmethod
    def _check_header(source_path: Path, table_name: str, header: List[str]) -> List[str]:
        """Reject headers naming unknown columns or lacking the key; return the key columns"""
        target = Base.metadata.tables[table_name]
        key_columns = [c.name for c in target.primary_key.columns]

        unknown = [name for name in header if name not in target.c.keys()]
        missing_keys = [key for key in key_columns if key not in header]
        if unknown or missing_keys:
            reason = (
                f"header does not match table (unknown columns: {unknown}, "
                f"missing key columns: {missing_keys})"
            )
            logger.error("File load failed", file=str(source_path), target_table=table_name, error=reason)
            raise LoadError(source_path, table_name, reason)

        return key_columns

    async def load(
        self,
        source_path: Union[str, Path],
        table_name: str,
        row_cap: Optional[int] = None,
    ) -> LoadResult:
        """
        Load one CSV file into `table_name` inside a single transaction.

        Args:
            source_path: CSV file to read
            table_name: Target table; must belong to the schema
            row_cap: Maximum number of records to read, None for all

        Returns:
            LoadResult: Counts and timing for the file

        Raises:
            ValueError: Unknown table or a row cap below 1
            LoadError: The file could not be read or parsed, or its header
                does not match the table
        """
        self._check_table(table_name)
        if row_cap is not None and row_cap < 1:
            raise ValueError(f"row_cap must be at least 1, got {row_cap}")

        source_path = Path(source_path)
        started_at = datetime.utcnow()
        rows_loaded = 0
        rows_failed = 0

        logger.info(
            "Streaming file into table",
            file=str(source_path),
            target_table=table_name,
            row_cap=row_cap,
        )

        try:
            df = await asyncio.to_thread(self._read_csv, source_path, row_cap)
        except (OSError, pl.exceptions.PolarsError) as e:
            logger.error(
                "File load failed",
                file=str(source_path),
                target_table=table_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise LoadError(source_path, table_name, str(e)) from e

        key_columns = self._check_header(source_path, table_name, df.columns)
        stmt = insert(table(table_name, *(column(name) for name in df.columns)))

        async with self.database.transaction() as conn:
            for row_number, row in enumerate(df.iter_rows(named=True), start=1):
                if any(row[key] is None for key in key_columns):
                    rows_failed += 1
                    logger.warning(
                        "Row has an empty key, skipping",
                        target_table=table_name,
                        row=row_number,
                        key_columns=key_columns,
                    )
                    continue

                try:
                    await conn.execute(stmt, row)
                    rows_loaded += 1
                except SQLAlchemyError as e:
                    rows_failed += 1
                    logger.warning(
                        "Row insert failed, skipping",
                        target_table=table_name,
                        row=row_number,
                        error=str(getattr(e, "orig", None) or e),
                    )

        completed_at = datetime.utcnow()
        rows_read = rows_loaded + rows_failed
        result = LoadResult(
            source_path=str(source_path),
            target_table=table_name,
            status=LoadStatus.PARTIAL if rows_failed else LoadStatus.COMPLETED,
            rows_read=rows_read,
            rows_loaded=rows_loaded,
            rows_failed=rows_failed,
            row_cap=row_cap,
            capped=row_cap is not None and rows_read >= row_cap,
            started_at=started_at,
            completed_at=completed_at,
            load_duration_seconds=(completed_at - started_at).total_seconds(),
        )

        logger.info(
            "File streamed successfully",
            target_table=table_name,
            rows_loaded=rows_loaded,
            rows_failed=rows_failed,
            capped=result.capped,
            duration_seconds=result.load_duration_seconds,
        )
        return result
