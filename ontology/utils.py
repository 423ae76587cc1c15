"""Utility helpers shared by the template compiler and its adapters."""
import re

from rdflib import Namespace

# Base namespace for identifiers without an explicit prefix
BASE = Namespace("http://plantilla.local/ont#")

DEFAULT_PREFIXES = {
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
    "owl": "http://www.w3.org/2002/07/owl#",
    "xsd": "http://www.w3.org/2001/XMLSchema#",
    "obo": "http://purl.obolibrary.org/obo/",
    "oboInOwl": "http://www.geneontology.org/formats/oboInOwl#",
    "dc": "http://purl.org/dc/elements/1.1/",
    "dcterms": "http://purl.org/dc/terms/",
    "skos": "http://www.w3.org/2004/02/skos/core#",
    "pl": str(BASE),
}

# A name the expression parser accepts without quotes
BARE_NAME_PATTERN = r"(?:[^\W\d][\w\-.]*(?::[\w\-.]*)?|:[\w\-.]+)"
BARE_NAME = re.compile(f"^{BARE_NAME_PATTERN}$")

KEYWORDS = frozenset(
    ["and", "or", "not", "some", "only", "value", "min", "max", "exactly", "that", "inverse"]
)


def short_form(iri: str) -> str:
    """Return the fragment or last path segment of ``iri``."""
    text = str(iri)
    for sep in ("#", "/", ":"):
        if sep in text:
            tail = text.rsplit(sep, 1)[1]
            if tail:
                return tail
    return text


def is_bare_name(text: str) -> bool:
    """Return ``True`` if ``text`` can appear unquoted in a class expression."""
    if not text or text[0].isdigit() or text in KEYWORDS:
        return False
    return bool(BARE_NAME.match(text))


def quote_name(value: str) -> str:
    """Wrap ``value`` in single quotes unless it is already a usable name."""
    if value.startswith("'") and value.endswith("'") and len(value) > 1:
        return value
    if value.startswith("<") and value.endswith(">"):
        return value
    if is_bare_name(value):
        return value
    return f"'{value}'"


def unquote_name(name: str) -> str:
    """Strip surrounding single quotes from ``name``."""
    name = name.strip()
    if len(name) > 1 and name.startswith("'") and name.endswith("'"):
        return name[1:-1]
    return name


__all__ = [
    "BASE",
    "DEFAULT_PREFIXES",
    "short_form",
    "is_bare_name",
    "quote_name",
    "unquote_name",
]
