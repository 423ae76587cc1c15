"""Errors raised while compiling template tables.

Every error is fatal. Each one carries the location of the offending cell
(table, 1-based row and column, column header) and the raw text so that a
spreadsheet author can find and fix it.
"""
from __future__ import annotations

from typing import Optional


class TemplateError(Exception):
    """Base class for all template compilation errors."""

    summary = "Template error"

    def __init__(
        self,
        detail: str = "",
        *,
        table: Optional[str] = None,
        row: Optional[int] = None,
        column: Optional[int] = None,
        header: Optional[str] = None,
        value: Optional[str] = None,
        row_id: Optional[str] = None,
    ) -> None:
        self.detail = detail
        self.table = table
        self.row = row
        self.column = column
        self.header = header
        self.value = value
        self.row_id = row_id
        super().__init__(self._format())

    def _format(self) -> str:
        message = self.summary
        if self.value is not None:
            message += f' "{self.value}"'
        location = []
        if self.row is not None:
            row = f"row {self.row}"
            if self.row_id is not None:
                row += f' ("{self.row_id}")'
            location.append(row)
        if self.column is not None:
            column = f"column {self.column}"
            if self.header is not None:
                column += f' ("{self.header}")'
            location.append(column)
        if self.table is not None:
            location.append(f'table "{self.table}"')
        if location:
            message += " at " + ", ".join(location)
        if self.detail:
            message += f": {self.detail}"
        return message

    def context(self) -> dict:
        return {
            "table": self.table,
            "row": self.row,
            "column": self.column,
            "header": self.header,
            "value": self.value,
            "row_id": self.row_id,
        }


class StructuralMismatchError(TemplateError):
    summary = "Malformed table"


class MissingIdentifierColumnError(TemplateError):
    summary = 'Template row must include exactly one "ID" column'


class UnknownTemplateError(TemplateError):
    summary = "Could not interpret template string"


class IdentifierError(TemplateError):
    summary = "Could not create IRI for"


class NameResolutionError(TemplateError):
    summary = "Could not resolve name"

    def __init__(self, name: str, detail: str = "", **context) -> None:
        self.name = name
        context.setdefault("value", name)
        super().__init__(detail, **context)


class ExpressionParseError(TemplateError):
    summary = "Error while parsing"

    def __init__(self, expression: str, detail: str = "", **context) -> None:
        self.expression = expression
        context.setdefault("value", expression)
        super().__init__(detail, **context)


class MissingClassTypeError(TemplateError):
    summary = "No class type found"


class UnknownClassTypeError(TemplateError):
    summary = "Unknown class type"


__all__ = [
    "TemplateError",
    "StructuralMismatchError",
    "MissingIdentifierColumnError",
    "UnknownTemplateError",
    "IdentifierError",
    "NameResolutionError",
    "ExpressionParseError",
    "MissingClassTypeError",
    "UnknownClassTypeError",
]
