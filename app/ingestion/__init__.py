"""
app/ingestion package marker.
"""

from app.ingestion.csv_parser import CSVRowSource, ParseError, parse_csv
from app.ingestion.notifier import Notifier
from app.ingestion.pipeline import BulkImportPipeline, ImportHandler
from app.ingestion.reporter import BatchReporter
from app.ingestion.writer import RowWriteError, TransactionalWriter

__all__ = [
    "BatchReporter",
    "BulkImportPipeline",
    "CSVRowSource",
    "ImportHandler",
    "Notifier",
    "ParseError",
    "RowWriteError",
    "TransactionalWriter",
    "parse_csv",
]
