from __future__ import annotations

import csv
import logging
import re
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException
from xlrd import XLRDError

from .mapping import coerce_cell, is_valid, map_rows
from .models import Contact

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
CSV_EXTENSIONS = {".csv"}
EXCEL_EXTENSIONS = {".xlsx", ".xls"}
PASTED_SPLIT_RE = re.compile(r"\t|,|;")

RowPairs = List[Tuple[str, Any]]


class IngestionError(Exception):
    """A contact source could not be turned into rows; ``str(exc)`` is user-facing."""


class MissingFileError(IngestionError):
    pass


class FileTooLargeError(IngestionError):
    pass


class UnsupportedFormatError(IngestionError):
    pass


class EmptyFileError(IngestionError):
    pass


class CorruptFileError(IngestionError):
    pass


@dataclass(frozen=True)
class ReaderLimits:
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES
    max_rows: Optional[int] = None


def _check_file(path: Path, limits: ReaderLimits) -> None:
    if not path.is_file():
        raise MissingFileError(f"File not found: {path}")
    size = path.stat().st_size
    if size > limits.max_file_size_bytes:
        max_mb = limits.max_file_size_bytes / (1024 * 1024)
        raise FileTooLargeError(f"File too large ({path.name}). Maximum allowed: {max_mb:g}MB")
    if size == 0:
        raise EmptyFileError(f"File is empty: {path.name}")


def _frame_to_rows(frame: pd.DataFrame, source: str) -> List[RowPairs]:
    if frame.empty:
        raise EmptyFileError(f"No header row found in {source}")
    headers = [coerce_cell(value) for value in frame.iloc[0].tolist()]
    rows: List[RowPairs] = []
    for values in frame.iloc[1:].itertuples(index=False, name=None):
        pairs = [(header, value) for header, value in zip(headers, values) if header]
        if any(coerce_cell(value) for _, value in pairs):
            rows.append(pairs)
    return rows


def _header_width(path: Path) -> int:
    with open(path, "r", encoding="utf-8-sig", newline="") as handle:
        for cells in csv.reader(handle):
            # pandas drops whitespace-only lines the same way
            if len(cells) > 1 or (cells and cells[0].strip()):
                return len(cells)
    return 0


def _read_csv_frame(path: Path) -> pd.DataFrame:
    try:
        width = _header_width(path)
        if not width:
            raise EmptyFileError(f"File is empty: {path.name}")
        # rows longer than the header row are cut to its width, shorter ones padded
        return pd.read_csv(
            path,
            header=None,
            names=list(range(width)),
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=lambda cells: cells[:width],
        )
    except pd.errors.EmptyDataError:
        raise EmptyFileError(f"File is empty: {path.name}") from None
    except (pd.errors.ParserError, csv.Error, UnicodeDecodeError) as exc:
        raise CorruptFileError(f"Could not read CSV {path.name}: {exc}") from exc


def _read_excel_frame(path: Path) -> pd.DataFrame:
    engine = "openpyxl" if path.suffix.lower() == ".xlsx" else None
    try:
        return pd.read_excel(path, sheet_name=0, header=None, dtype=object, engine=engine)
    except (
        ValueError,
        OSError,
        KeyError,
        zipfile.BadZipFile,
        InvalidFileException,
        XLRDError,
    ) as exc:
        raise CorruptFileError(f"Could not read Excel file {path.name}: {exc}") from exc


def read_rows(
    path: Union[str, Path], limits: Optional[ReaderLimits] = None
) -> List[RowPairs]:
    """
    Read a CSV or Excel file into rows of (header, value) pairs.

    The first row is the header row; only the first worksheet of a workbook is
    read. Rows with no content are skipped and rows past ``limits.max_rows``
    are dropped.
    """
    limits = limits or ReaderLimits()
    path = Path(path)
    extension = path.suffix.lower()
    if extension not in CSV_EXTENSIONS | EXCEL_EXTENSIONS:
        raise UnsupportedFormatError(f"Unsupported file format: {path.name}")
    _check_file(path, limits)

    logger.info("Parsing file: %s (%d bytes)", path, path.stat().st_size)
    if extension in CSV_EXTENSIONS:
        frame = _read_csv_frame(path)
    else:
        frame = _read_excel_frame(path)
    rows = _frame_to_rows(frame, path.name)

    if limits.max_rows is not None and len(rows) > limits.max_rows:
        logger.warning(
            "%s has %d rows, keeping the first %d", path.name, len(rows), limits.max_rows
        )
        rows = rows[: limits.max_rows]
    return rows


def load_contacts(
    path: Union[str, Path], limits: Optional[ReaderLimits] = None
) -> List[Contact]:
    contacts = map_rows(read_rows(path, limits))
    logger.info("Extracted %d contact(s) from %s", len(contacts), path)
    return contacts


def parse_pasted_text(text: str, limits: Optional[ReaderLimits] = None) -> List[Contact]:
    """
    Parse a pasted name/phone list, one contact per line.

    Columns may be separated by tabs, commas or semicolons; the first column
    is the name and the second the phone number.
    """
    limits = limits or ReaderLimits()
    contacts: List[Contact] = []
    for line in (text or "").splitlines():
        if not line.strip():
            continue
        parts = [part.strip() for part in PASTED_SPLIT_RE.split(line)]
        name = parts[0] if parts else ""
        phone = parts[1] if len(parts) > 1 else ""
        contact = Contact.from_simple(name, phone)
        if is_valid(contact):
            contacts.append(contact)
    if limits.max_rows is not None and len(contacts) > limits.max_rows:
        logger.warning(
            "Pasted list has %d rows, keeping the first %d", len(contacts), limits.max_rows
        )
        contacts = contacts[: limits.max_rows]
    return contacts
