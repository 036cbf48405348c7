"""
app/ingestion/csv_parser.py

Turns a CSV payload into trimmed string rows keyed by header name.
"""

from __future__ import annotations

import csv
import io
import os
from collections.abc import Iterator
from pathlib import Path
from typing import IO, Union

from app.domain.bulk_import import ImportRow

CSVSource = Union[str, bytes, bytearray, os.PathLike]


class ParseError(ValueError):
    """
    Raised when a CSV payload cannot be read at all.
    """


class CSVRowSource:
    """
    Lazy, finite row sequence over one CSV payload.

    Every iteration re-reads the payload from the start, so the same source can
    be walked more than once (e.g. once for reference prefetch, once for
    validation).
    """

    def __init__(self, *, path: Path | None = None, payload: bytes | str | None = None) -> None:
        if (path is None) == (payload is None):
            raise ValueError("Exactly one of path or payload must be given.")
        self._path = path
        self._payload = payload

    @property
    def label(self) -> str:
        return str(self._path) if self._path is not None else "<memory>"

    def __iter__(self) -> Iterator[ImportRow]:
        for _, row in self.numbered():
            yield row

    def numbered(self) -> Iterator[tuple[int, ImportRow]]:
        """
        Yield ``(row_number, row)`` pairs; the header is row 1.
        """

        stream = self._open()
        try:
            reader = csv.reader(stream)
            header_cells = next(reader, None)
            if header_cells is None:
                return
            headers = [_clean_header(cell) for cell in header_cells]
            if not any(headers):
                return

            for row_number, cells in enumerate(reader, start=2):
                if not cells or all(not cell.strip() for cell in cells):
                    continue
                yield row_number, _build_row(headers, cells)
        except UnicodeDecodeError as exc:
            raise ParseError("CSV must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise ParseError(f"Invalid CSV format: {exc}") from exc
        finally:
            stream.close()

    def _open(self) -> IO[str]:
        if self._path is not None:
            try:
                return self._path.open("r", encoding="utf-8-sig", newline="")
            except OSError as exc:
                raise ParseError(f"CSV file could not be opened: {self._path}") from exc
        if isinstance(self._payload, bytes):
            return io.TextIOWrapper(io.BytesIO(self._payload), encoding="utf-8-sig", newline="")
        return io.StringIO(str(self._payload).lstrip("\ufeff"), newline="")


def parse_csv(source: CSVSource) -> CSVRowSource:
    """
    Build a row source from a filesystem path or an in-memory payload.

    A ``str`` names a path when such a file exists; otherwise it is read as
    CSV text when it contains a line break (or is blank), else it is a
    missing path and ``ParseError`` is raised.
    """

    if isinstance(source, (bytes, bytearray)):
        return CSVRowSource(payload=bytes(source))

    if isinstance(source, os.PathLike):
        path = Path(source)
        if not path.is_file():
            raise ParseError(f"CSV file not found: {path}")
        return CSVRowSource(path=path)

    if isinstance(source, str):
        if _is_existing_file(source):
            return CSVRowSource(path=Path(source))
        if "\n" in source or "\r" in source or not source.strip():
            return CSVRowSource(payload=source)
        raise ParseError(f"CSV file not found: {source}")

    raise ParseError(f"Unsupported CSV source type: {type(source).__name__}")


def _is_existing_file(candidate: str) -> bool:
    if not candidate or "\n" in candidate or "\x00" in candidate:
        return False
    try:
        return Path(candidate).is_file()
    except OSError:
        return False


def _clean_header(cell: str) -> str:
    return cell.replace("\ufeff", "").strip()


def _build_row(headers: list[str], cells: list[str]) -> ImportRow:
    row: ImportRow = {}
    for index, header in enumerate(headers):
        if not header:
            continue
        value = cells[index] if index < len(cells) else ""
        row[header] = "" if value is None else str(value).strip()
    return row
