"""Turn identifiers written in spreadsheet cells into IRIs."""
from __future__ import annotations

import re
from typing import Mapping, Optional

from rdflib import URIRef

from .utils import BASE, DEFAULT_PREFIXES

ABSOLUTE_IRI = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://\S+$")
CURIE = re.compile(r"^([A-Za-z_][\w\-.]*)?:(\S*)$")


class IriResolver:
    """Expand CURIEs and bare names into IRIs.

    ``resolve`` returns ``None`` when the text cannot be turned into an IRI:
    blank text, whitespace inside a name, or a prefix that is not known.
    Bare names are placed in ``base`` when one is configured.
    """

    def __init__(
        self,
        prefixes: Optional[Mapping[str, str]] = None,
        base: Optional[str] = str(BASE),
    ) -> None:
        self.prefixes: dict[str, str] = dict(DEFAULT_PREFIXES)
        if prefixes:
            self.prefixes.update(prefixes)
        self.base = base

    def add_prefix(self, prefix: str, namespace: str) -> None:
        self.prefixes[prefix] = namespace

    def add_prefix_line(self, line: str) -> None:
        """Register a prefix written as ``"prefix: namespace"``."""
        prefix, sep, namespace = line.partition(":")
        namespace = namespace.strip()
        if not sep or not prefix.strip() or not namespace:
            raise ValueError(f"Invalid prefix definition: {line!r}")
        self.add_prefix(prefix.strip(), namespace)

    def resolve(self, text: Optional[str]) -> Optional[URIRef]:
        if text is None:
            return None
        term = text.strip()
        if not term:
            return None
        if term.startswith("<") and term.endswith(">"):
            term = term[1:-1].strip()
            return URIRef(term) if term and not re.search(r"\s", term) else None
        if ABSOLUTE_IRI.match(term) or term.startswith("urn:"):
            return URIRef(term)
        match = CURIE.match(term)
        if match:
            prefix = match.group(1) or ""
            if prefix in self.prefixes:
                return URIRef(self.prefixes[prefix] + match.group(2))
            return None
        if re.search(r"\s", term) or not self.base:
            return None
        return URIRef(self.base + term)

    def compact(self, iri: str) -> Optional[str]:
        """Return the CURIE for ``iri`` using the longest matching namespace."""
        iri = str(iri)
        best = None
        for prefix, namespace in self.prefixes.items():
            if iri.startswith(namespace) and len(iri) > len(namespace):
                if best is None or len(namespace) > len(self.prefixes[best]):
                    best = prefix
        if best is None:
            return None
        return f"{best}:{iri[len(self.prefixes[best]):]}"


__all__ = ["IriResolver"]
