"""
Infraestructura: lectura y escritura de ontologías con rdflib.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from rdflib import Graph
from rdflib.util import guess_format

DEFAULT_FORMAT = "turtle"


def load_ontology(
    source: Union[str, Path, bytes], name: Optional[str] = None, fmt: Optional[str] = None
) -> Graph:
    """Parse an ontology file (or uploaded bytes named ``name``) into a graph."""
    graph = Graph()
    if isinstance(source, bytes):
        fmt = fmt or guess_format(name or "") or "xml"
        graph.parse(data=source, format=fmt)
    else:
        fmt = fmt or guess_format(str(source)) or "xml"
        graph.parse(str(source), format=fmt)
    return graph


def save_ontology(graph: Graph, destination: Union[str, Path], fmt: Optional[str] = None) -> str:
    """Serialize ``graph`` to ``destination``; return the format used."""
    fmt = fmt or guess_format(str(destination)) or DEFAULT_FORMAT
    graph.serialize(destination=str(destination), format=fmt)
    return fmt


__all__ = ["load_ontology", "save_ontology", "DEFAULT_FORMAT"]
