"""Template directive grammar.

The second row of every table holds one template string per column. Each
string is classified once, when the table is loaded, into one of the
directive types below:

========================  =================================================
``ID``                    column holding the row identifier
``TYPE``                  entity kind (``owl:Class`` when absent)
``CLASS_TYPE``            ``subclass`` (default) or ``equivalent``
``A prop``                plain literal annotation
``AT prop^^datatype``     typed literal annotation
``AL prop@lang``          language tagged annotation
``AI prop``               IRI valued annotation
``C template``            class expression, ``%`` replaced by the cell
``CI``                    cell is the IRI of a class
========================  =================================================

Value bearing directives accept a ``SPLIT=<delimiter>`` modifier anywhere in
the string; the cell is then split on the literal delimiter and the directive
is applied to every piece.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

SPLIT_PATTERN = re.compile(r"SPLIT=(\S+)")
LANGUAGE_TAG = re.compile(r"^[A-Za-z]{1,8}(-[A-Za-z0-9]{1,8})*$")


@dataclass(frozen=True)
class IdDirective:
    pass


@dataclass(frozen=True)
class TypeDirective:
    split: Optional[str] = None


@dataclass(frozen=True)
class ClassTypeDirective:
    pass


@dataclass(frozen=True)
class StringAnnotationDirective:
    property_name: str
    split: Optional[str] = None


@dataclass(frozen=True)
class TypedAnnotationDirective:
    property_name: str
    datatype_name: str
    split: Optional[str] = None


@dataclass(frozen=True)
class LanguageAnnotationDirective:
    property_name: str
    language: str
    split: Optional[str] = None


@dataclass(frozen=True)
class IriAnnotationDirective:
    property_name: str
    split: Optional[str] = None


@dataclass(frozen=True)
class ClassExpressionDirective:
    template: str
    split: Optional[str] = None

    def substitute(self, value: str) -> str:
        """Replace every ``%`` placeholder with ``value``."""
        return self.template.replace("%", value)


@dataclass(frozen=True)
class ClassReferenceDirective:
    split: Optional[str] = None


Directive = Union[
    IdDirective,
    TypeDirective,
    ClassTypeDirective,
    StringAnnotationDirective,
    TypedAnnotationDirective,
    LanguageAnnotationDirective,
    IriAnnotationDirective,
    ClassExpressionDirective,
    ClassReferenceDirective,
]

ANNOTATION_DIRECTIVES = (
    StringAnnotationDirective,
    TypedAnnotationDirective,
    LanguageAnnotationDirective,
    IriAnnotationDirective,
)


def _require(text: str) -> str:
    text = text.strip()
    if not text:
        raise ValueError("missing argument")
    return text


def parse_directive(template: Optional[str]) -> Optional[Directive]:
    """Classify ``template``.

    Returns ``None`` for an empty or missing template (the column is unused)
    and raises ``ValueError`` when the string matches no directive.
    """
    if template is None:
        return None
    text = template.strip()
    if not text:
        return None

    split = None
    match = SPLIT_PATTERN.search(text)
    if match:
        split = match.group(1)
        text = SPLIT_PATTERN.sub("", text).strip()

    if text == "ID" and split is None:
        return IdDirective()
    if text == "CLASS_TYPE" and split is None:
        return ClassTypeDirective()
    if text == "TYPE":
        return TypeDirective(split)
    if text == "CI":
        return ClassReferenceDirective(split)

    kind, _, rest = text.partition(" ")
    if kind == "A":
        return StringAnnotationDirective(_require(rest), split)
    if kind == "AI":
        return IriAnnotationDirective(_require(rest), split)
    if kind == "AT" and "^^" in rest:
        name, _, datatype = rest.partition("^^")
        return TypedAnnotationDirective(
            _require(name), _require(datatype), split
        )
    if kind == "AL" and "@" in rest:
        name, _, language = rest.rpartition("@")
        language = _require(language)
        if not LANGUAGE_TAG.match(language):
            raise ValueError(f"invalid language tag {language!r}")
        return LanguageAnnotationDirective(_require(name), language, split)
    if kind == "C":
        return ClassExpressionDirective(_require(rest), split)

    raise ValueError("unrecognised directive")


def validate_template_string(template: str) -> bool:
    """Return ``True`` if ``template`` is empty or a recognised directive."""
    try:
        parse_directive(template)
    except ValueError:
        return False
    return True


def split_values(value: str, delimiter: Optional[str]) -> list[str]:
    """Return the stripped, non-blank pieces of ``value``."""
    pieces = value.split(delimiter) if delimiter else [value]
    return [p.strip() for p in pieces if p.strip()]


__all__ = [
    "IdDirective",
    "TypeDirective",
    "ClassTypeDirective",
    "StringAnnotationDirective",
    "TypedAnnotationDirective",
    "LanguageAnnotationDirective",
    "IriAnnotationDirective",
    "ClassExpressionDirective",
    "ClassReferenceDirective",
    "Directive",
    "ANNOTATION_DIRECTIVES",
    "parse_directive",
    "validate_template_string",
    "split_values",
]
