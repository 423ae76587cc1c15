"""Infrastructure: loader for the template contract YAML.

A contract groups the template tables of one ontology together with the
settings the compiler needs::

    ontology:
      iri: http://example.org/widgets.owl
      base: http://example.org/widgets#
    prefixes:
      ex: http://example.org/widgets#
    input: base.owl          # optional ontology providing known names
    output: widgets.ttl
    format: turtle
    tables:
      - file: classes.csv
      - file: properties.tsv
        name: props

Relative paths are resolved against the directory of the contract file.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import yaml


@dataclass
class TableEntry:
    """Template table listed in a contract."""

    file: Path
    name: Optional[str] = None


@dataclass
class TemplateContract:
    """Structured representation of a template contract."""

    ontology_iri: Optional[str] = None
    base_iri: Optional[str] = None
    prefixes: Dict[str, str] = field(default_factory=dict)
    input: Optional[Path] = None
    output: Optional[Path] = None
    format: Optional[str] = None
    tables: list[TableEntry] = field(default_factory=list)


__all__ = ["TableEntry", "TemplateContract", "load_template_contract"]


def _resolve(root: Path, value: Optional[str]) -> Optional[Path]:
    if not value:
        return None
    path = Path(value)
    return path if path.is_absolute() else root / path


def load_template_contract(path: str | Path) -> TemplateContract:
    """Load a template contract from ``path``."""
    path = Path(path)
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise TypeError("contract must be a mapping")
    root = path.parent

    info = data.get("ontology") or {}
    if not isinstance(info, dict):
        raise TypeError("ontology must be a mapping")

    prefixes = data.get("prefixes") or {}
    if not isinstance(prefixes, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in prefixes.items()
    ):
        raise TypeError("prefixes must map prefix names to namespace strings")

    tables: list[TableEntry] = []
    entries = data.get("tables") or []
    if not isinstance(entries, list):
        raise TypeError("tables must be a list")
    for entry in entries:
        if isinstance(entry, str):
            entry = {"file": entry}
        if not isinstance(entry, dict) or not entry.get("file"):
            raise ValueError(f"table entry without file: {entry!r}")
        tables.append(TableEntry(file=_resolve(root, str(entry["file"])), name=entry.get("name")))

    return TemplateContract(
        ontology_iri=info.get("iri"),
        base_iri=info.get("base"),
        prefixes=dict(prefixes),
        input=_resolve(root, data.get("input")),
        output=_resolve(root, data.get("output")),
        format=data.get("format"),
        tables=tables,
    )
