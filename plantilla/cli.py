"""Command-line interface for the Plantilla template compiler."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from adapter.contract_loader import TemplateContract, load_template_contract
from adapter.csv_loader import read_tables
from adapter.ontology_io import DEFAULT_FORMAT, load_ontology, save_ontology
from ontology.errors import TemplateError
from ontology.iri import IriResolver
from ontology.template import TemplateCompiler

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compile template tables into an OWL ontology"
    )
    parser.add_argument(
        "--template",
        action="append",
        default=[],
        help="Template table (CSV, TSV or Excel); may be repeated",
    )
    parser.add_argument("--contract", help="YAML template contract")
    parser.add_argument("--input", help="Ontology providing known entities and labels")
    parser.add_argument(
        "--prefix",
        action="append",
        default=[],
        help='Extra prefix as "prefix: namespace"; may be repeated',
    )
    parser.add_argument("--base-iri", help="Namespace for identifiers without prefix")
    parser.add_argument("--ontology-iri", help="IRI of the generated ontology")
    parser.add_argument("--output", help="Output file (Turtle on stdout if omitted)")
    parser.add_argument("--format", help="rdflib serialization format")
    parser.add_argument(
        "--list-ids",
        action="store_true",
        help="Print the IRI of every row instead of compiling",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def _build_resolver(args: argparse.Namespace, contract: TemplateContract) -> IriResolver:
    resolver = IriResolver(contract.prefixes)
    if args.base_iri or contract.base_iri:
        resolver.base = args.base_iri or contract.base_iri
    for line in args.prefix:
        try:
            resolver.add_prefix_line(line)
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc
    return resolver


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    contract = load_template_contract(args.contract) if args.contract else TemplateContract()
    sources: list = [Path(t) for t in args.template]
    names: list = [None] * len(sources)
    for entry in contract.tables:
        sources.append(entry.file)
        names.append(entry.name)
    if not sources:
        raise SystemExit("No template tables given (use --template or --contract)")

    tables = read_tables(sources, names)
    resolver = _build_resolver(args, contract)
    compiler = TemplateCompiler(
        resolver, ontology_iri=args.ontology_iri or contract.ontology_iri
    )

    try:
        if args.list_ids:
            for iri in compiler.list_identifiers(tables):
                print(iri)
            return
        input_path = args.input or contract.input
        base_graph = load_ontology(input_path) if input_path else None
        document = compiler.compile(tables, base_graph)
    except TemplateError as exc:
        raise SystemExit(str(exc)) from exc

    graph = document.to_graph()
    output = args.output or contract.output
    fmt = args.format or contract.format
    if output is None:
        sys.stdout.write(graph.serialize(format=fmt or DEFAULT_FORMAT))
        return
    fmt = save_ontology(graph, output, fmt)
    logger.info("Wrote %s (%s)", output, fmt)


if __name__ == "__main__":  # pragma: no cover - manual entrypoint
    main(sys.argv[1:])
