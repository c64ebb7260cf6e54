"""
app/services/spreadsheet_reader.py

Turns uploaded timesheet bytes into a header list and raw value rows.

Supported inputs are ``.xlsx`` workbooks (detected by ZIP signature) and
delimited text. Legacy binary ``.xls`` (OLE compound file) is recognized
and rejected with an actionable message. Exports carry a block of
metadata rows above the header row; ``start_offset`` says how many.
"""

from __future__ import annotations

import csv
import io
import logging
import zipfile
from dataclasses import dataclass, field
from typing import Any

import openpyxl

from app.config import DEFAULT_HEADER_ROW_OFFSET
from app.validators.value_parser import is_blank

logger = logging.getLogger(__name__)

ZIP_SIGNATURE = b"PK\x03\x04"
OLE_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
CANDIDATE_DELIMITERS = ",;\t|"
_SNIFF_SAMPLE_BYTES = 64 * 1024


class SpreadsheetFormatError(ValueError):
    """
    Raised when an uploaded file cannot be read as a timesheet table.
    """

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source

    def to_dict(self) -> dict[str, object]:
        return {"message": str(self), "source": self.source}


@dataclass(frozen=True)
class SpreadsheetTable:
    """
    Header row and data rows below it. Row numbers are 1-based sheet rows.
    """

    headers: list[str]
    rows: list[list[Any]] = field(default_factory=list)
    row_numbers: list[int] = field(default_factory=list)
    start_offset: int = DEFAULT_HEADER_ROW_OFFSET

    def raw_rows(self) -> list[tuple[int, dict[str, Any]]]:
        """
        Pair each data row with its headers as ``(row_number, RawRow)``.
        """

        return [
            (row_number, {header: value for header, value in zip(self.headers, values) if header})
            for row_number, values in zip(self.row_numbers, self.rows)
        ]


class SpreadsheetReader:
    """
    Reads xlsx or delimited text into a ``SpreadsheetTable``.
    """

    def __init__(self, *, start_offset: int = DEFAULT_HEADER_ROW_OFFSET) -> None:
        self._start_offset = max(0, start_offset)

    def read(self, content: bytes, filename: str | None = None) -> SpreadsheetTable:
        source = filename or "<upload>"
        if not content:
            raise SpreadsheetFormatError("Uploaded file is empty.", source=source)

        if content.startswith(OLE_SIGNATURE):
            raise SpreadsheetFormatError(
                "Legacy binary .xls files are not supported; re-save the export as .xlsx or .csv.",
                source=source,
            )

        if content.startswith(ZIP_SIGNATURE):
            grid = self._read_xlsx(content, source)
        else:
            grid = self._read_delimited(content, source)

        return self._to_table(grid, source)

    # ------------------------------------------------------------------
    # Format readers
    # ------------------------------------------------------------------

    @staticmethod
    def _read_xlsx(content: bytes, source: str) -> list[list[Any]]:
        try:
            wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        except (zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
            raise SpreadsheetFormatError(f"Invalid xlsx workbook: {exc}", source=source) from exc

        try:
            ws = wb.worksheets[0] if wb.worksheets else None
            if ws is None:
                raise SpreadsheetFormatError("Workbook has no worksheets.", source=source)
            return [list(values) for values in ws.iter_rows(values_only=True)]
        finally:
            wb.close()

    @staticmethod
    def _decode(content: bytes, source: str) -> str:
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError:
            pass
        try:
            return content.decode("cp1252")
        except UnicodeDecodeError as exc:
            raise SpreadsheetFormatError("File must be UTF-8 or Windows-1252 encoded text.", source=source) from exc

    def _read_delimited(self, content: bytes, source: str) -> list[list[Any]]:
        text = self._decode(content, source)
        delimiter = self.sniff_delimiter(text[:_SNIFF_SAMPLE_BYTES])
        try:
            return [list(values) for values in csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)]
        except csv.Error as exc:
            raise SpreadsheetFormatError(f"Invalid delimited text: {exc}", source=source) from exc

    @staticmethod
    def sniff_delimiter(sample: str) -> str:
        try:
            return csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS).delimiter
        except csv.Error:
            return ","

    # ------------------------------------------------------------------
    # Table assembly
    # ------------------------------------------------------------------

    def _to_table(self, grid: list[list[Any]], source: str) -> SpreadsheetTable:
        if len(grid) <= self._start_offset:
            raise SpreadsheetFormatError(
                f"Expected the header row at row {self._start_offset + 1}, "
                f"but the file has {len(grid)} row(s).",
                source=source,
            )

        header_cells = grid[self._start_offset]
        headers = ["" if is_blank(cell) else str(cell).strip() for cell in header_cells]
        while headers and not headers[-1]:
            headers.pop()
        if not headers:
            raise SpreadsheetFormatError(
                f"Header row {self._start_offset + 1} is empty.",
                source=source,
            )

        width = len(headers)
        rows: list[list[Any]] = []
        row_numbers: list[int] = []
        for index, values in enumerate(grid[self._start_offset + 1 :], start=self._start_offset + 2):
            padded = (list(values) + [None] * width)[:width]
            if all(is_blank(value) for value in padded):
                continue
            rows.append(padded)
            row_numbers.append(index)

        logger.debug("Read %d data row(s) from %s", len(rows), source)
        return SpreadsheetTable(
            headers=headers,
            rows=rows,
            row_numbers=row_numbers,
            start_offset=self._start_offset,
        )
