"""
Order-Line Loader

Reads the Superstore CSV export into a typed polars DataFrame.
Every field is read as text first so that type coercion happens in one
place and fails loudly instead of silently producing nulls.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union
import hashlib

import polars as pl
import structlog

from superstore_analytics.config.settings import InputSettings
from superstore_analytics.errors import MalformedInputError
from superstore_analytics.transformation.cleaners import DataCleaner

logger = structlog.get_logger(__name__)

NULL_VALUES = ["", "NA", "N/A", "NULL", "null", "None"]


@dataclass
class LoadResult:
    """Metadata of a load operation"""
    file_path: str
    rows_loaded: int
    columns: List[str]
    file_hash: str
    started_at: datetime
    completed_at: datetime

    @property
    def load_duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()


class OrderLoader:
    """
    Loader for the order-line CSV.

    Example:
        loader = OrderLoader()
        df = loader.load("data/superstore.csv")
    """

    def __init__(self, settings: Optional[InputSettings] = None):
        self.settings = settings or InputSettings()
        self.cleaner = DataCleaner(self.settings)
        self.last_result: Optional[LoadResult] = None

    def _compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file to identify the exact input of a report"""
        hash_md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()

    def _read_csv(self, file_path: Path) -> pl.DataFrame:
        """Read CSV with every column as text"""
        try:
            return pl.read_csv(
                file_path,
                separator=self.settings.delimiter,
                encoding=self.settings.encoding,
                infer_schema_length=0,
                null_values=NULL_VALUES,
            )
        except pl.exceptions.NoDataError as e:
            raise MalformedInputError(f"Input file is empty: {file_path}") from e
        except pl.exceptions.ComputeError as e:
            raise MalformedInputError(f"Cannot parse {file_path}: {e}") from e

    def load(self, file_path: Union[str, Path]) -> pl.DataFrame:
        """
        Load and type the order lines.

        Args:
            file_path: CSV path

        Returns:
            DataFrame with the declared order-line columns, typed

        Raises:
            MalformedInputError: file missing, column missing or unknown,
                or a value that cannot be coerced to its declared type
        """
        started_at = datetime.now(timezone.utc)
        path = Path(file_path)

        if not path.is_file():
            raise MalformedInputError(f"Input file not found: {path}")
        if path.stat().st_size == 0:
            raise MalformedInputError(f"Input file is empty: {path}")

        logger.info("Loading order lines", file=str(path))

        raw = self._read_csv(path)
        if raw.height == 0:
            raise MalformedInputError(f"Input file has no rows: {path}")

        df = self.cleaner.prepare(raw)

        self.last_result = LoadResult(
            file_path=str(path),
            rows_loaded=df.height,
            columns=df.columns,
            file_hash=self._compute_file_hash(path),
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
        )

        logger.info(
            "Order lines loaded",
            file=str(path),
            rows=df.height,
            columns=len(df.columns),
            duration_seconds=round(self.last_result.load_duration_seconds, 3),
        )
        return df


def load_orders(file_path: Union[str, Path], settings: Optional[InputSettings] = None) -> pl.DataFrame:
    """Convenience function to load the order-line CSV"""
    return OrderLoader(settings).load(file_path)
