"""
Infraestructura: carga de tablas de plantillas (CSV, TSV, Excel) como filas.

The header row fixes the width of a table: cells past the last header are
dropped from data rows. The template row keeps its own width so that a
template row longer or shorter than the header can be reported by the
compiler.
"""
from __future__ import annotations

import csv
import io
import pandas as pd
from pathlib import Path
from typing import BinaryIO, Union, IO, Optional

from streamlit.runtime.uploaded_file_manager import UploadedFile

FileType = Union[str, Path, UploadedFile, BinaryIO, IO[str]]
Rows = list[list[Optional[str]]]

EXCEL_SUFFIXES = {".xlsx", ".xls"}
TAB_SUFFIXES = {".tsv", ".tab"}


def _source_name(source: FileType) -> str:
    name = getattr(source, "name", None) or str(source)
    return str(name)


def _read_text(source: FileType) -> str:
    if isinstance(source, (str, Path)):
        return Path(source).read_text(encoding="utf-8-sig")
    data = source.read()
    return data.decode("utf-8-sig") if isinstance(data, bytes) else data


def _to_rows(df: pd.DataFrame) -> Rows:
    """Return the rows of ``df`` with missing cells as ``None``."""
    df = df.astype(object)
    df = df.where(df.notna() & (df != ""), None)
    return [list(row) for row in df.itertuples(index=False, name=None)]


def _used_width(row: list[Optional[str]]) -> int:
    """Index after the last non-empty cell of ``row``."""
    for index in range(len(row), 0, -1):
        if row[index - 1] is not None:
            return index
    return 0


def _fit_rows(rows: Rows, widths: Optional[list[int]] = None) -> Rows:
    """Cut rows to the header width, keeping the template row's own width.

    ``widths`` are the field counts read from a delimited file. Spreadsheet
    sheets have no such counts, so the widths are those of the used cells.
    """
    if not rows:
        return rows
    if widths is None:
        header_width = _used_width(rows[0])
        template_width = max(header_width, _used_width(rows[1])) if len(rows) > 1 else 0
    else:
        header_width = widths[0]
        template_width = widths[1] if len(widths) > 1 else 0
    fitted = [rows[0][:header_width]]
    if len(rows) > 1:
        fitted.append(rows[1][:template_width])
    fitted.extend(row[:header_width] for row in rows[2:])
    return fitted


def _read_delimited(source: FileType, sep: str) -> Rows:
    text = _read_text(source)
    # Field count of every record pandas keeps (blank lines are skipped)
    widths = [
        len(fields)
        for fields in csv.reader(io.StringIO(text), delimiter=sep)
        if len(fields) > 1 or (fields and fields[0].strip())
    ]
    if not widths:
        raise ValueError(f"La tabla {_source_name(source)} está vacía.")
    df = pd.read_csv(
        io.StringIO(text),
        sep=sep,
        header=None,
        names=list(range(max(widths))),
        dtype=str,
        keep_default_na=False,
        engine="python",
    )
    return _fit_rows(_to_rows(df), widths)


def _read_sheets(source: FileType) -> dict[Optional[str], Rows]:
    suffix = Path(_source_name(source)).suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        frames = pd.read_excel(source, sheet_name=None, header=None, dtype=str)
        return {
            sheet: _fit_rows(_to_rows(df))
            for sheet, df in frames.items()
            if not df.empty and len(df.columns) > 0
        }
    sep = "\t" if suffix in TAB_SUFFIXES else ","
    return {None: _read_delimited(source, sep)}


def read_table(source: FileType, name: Optional[str] = None) -> dict[str, Rows]:
    """Read ``source`` into ``{table_name: rows}``.

    CSV and TSV files produce one table named ``name`` (the file stem by
    default). Every sheet of an Excel workbook becomes its own table, named
    ``"<name>.<sheet>"`` when the workbook has more than one sheet.
    """
    stem = name or Path(_source_name(source)).stem
    sheets = _read_sheets(source)
    tables: dict[str, Rows] = {}
    for sheet, rows in sheets.items():
        if not rows or not rows[0]:
            continue
        table_name = stem if sheet is None or len(sheets) == 1 else f"{stem}.{sheet}"
        tables[table_name] = rows
    if not tables:
        raise ValueError(f"La tabla {_source_name(source)} no tiene columnas o está vacía.")
    return tables


def read_tables(sources: list[FileType], names: Optional[list[Optional[str]]] = None) -> dict[str, Rows]:
    """Read several template files, preserving their order."""
    names = names or [None] * len(sources)
    tables: dict[str, Rows] = {}
    for source, name in zip(sources, names):
        for table_name, rows in read_table(source, name).items():
            if table_name in tables:
                raise ValueError(f"Tabla duplicada: {table_name}")
            tables[table_name] = rows
    return tables


__all__ = ["FileType", "read_table", "read_tables"]
