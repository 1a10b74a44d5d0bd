"""
Data Ingestion Module
"""
from .csv_loader import CsvTableLoader, LoadError, LoadResult, LoadStatus

__all__ = [
    "CsvTableLoader",
    "LoadError",
    "LoadResult",
    "LoadStatus",
]
