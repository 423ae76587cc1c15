import logging

import pytest
from rdflib import OWL, RDF, RDFS, XSD, Graph, Literal, URIRef

from ontology.errors import (
    ExpressionParseError,
    IdentifierError,
    MissingClassTypeError,
    MissingIdentifierColumnError,
    NameResolutionError,
    StructuralMismatchError,
    UnknownClassTypeError,
    UnknownTemplateError,
)
from ontology.expressions import SOME, NamedClass, ObjectIntersectionOf, Restriction
from ontology.iri import IriResolver
from ontology.model import (
    ANNOTATION_PROPERTY,
    CLASS,
    DATA_PROPERTY,
    DATATYPE,
    INDIVIDUAL,
    OBJECT_PROPERTY,
    Annotation,
    AnnotationAssertion,
    Declaration,
    Entity,
    EquivalentClasses,
    SubClassOf,
)
from ontology.template import TemplateCompiler, compile_tables, list_identifiers, load_table
from ontology.utils import BASE

SYNONYM = URIRef("http://www.geneontology.org/formats/oboInOwl#hasExactSynonym")

PROPERTIES = [
    ["Id", "Type"],
    ["ID", "TYPE"],
    ["part_of", "owl:ObjectProperty"],
]


def test_single_row_declaration_and_label():
    tables = {
        "t": [
            ["Id", "Type", "Label"],
            ["ID", "TYPE", "A rdfs:label"],
            ["X1", "", "Widget"],
        ]
    }
    document = compile_tables(tables)
    assert document.axioms == [
        Declaration(Entity(BASE["X1"], CLASS)),
        AnnotationAssertion(BASE["X1"], Annotation(RDFS.label, Literal("Widget"))),
    ]


def test_split_annotation_in_order():
    tables = {
        "t": [
            ["Id", "Synonyms"],
            ["ID", "A oboInOwl:hasExactSynonym SPLIT=,"],
            ["X1", "foo,bar"],
        ]
    }
    document = compile_tables(tables)
    assert document.of_type(AnnotationAssertion) == [
        AnnotationAssertion(BASE["X1"], Annotation(SYNONYM, Literal("foo"))),
        AnnotationAssertion(BASE["X1"], Annotation(SYNONYM, Literal("bar"))),
    ]


def test_annotation_kinds():
    tables = {
        "t": [
            ["Id", "Count", "Name", "See"],
            ["ID", "AT rdfs:comment^^xsd:integer", "AL rdfs:label@es", "AI rdfs:seeAlso"],
            ["X1", "42", "Tuerca", "http://example.org/nut"],
        ]
    }
    document = compile_tables(tables)
    values = [a.annotation for a in document.of_type(AnnotationAssertion)]
    assert values == [
        Annotation(RDFS.comment, Literal("42", datatype=XSD.integer)),
        Annotation(RDFS.label, Literal("Tuerca", lang="es")),
        Annotation(RDFS.seeAlso, URIRef("http://example.org/nut")),
    ]


def test_type_selects_entity_kind():
    tables = {
        "t": [
            ["Id", "Type"],
            ["ID", "TYPE"],
            ["part_of", "owl:ObjectProperty"],
            ["acme", "Widget"],
        ]
    }
    document = compile_tables(tables)
    assert document.entities() == [
        Entity(BASE["part_of"], OBJECT_PROPERTY),
        Entity(BASE["acme"], INDIVIDUAL),
    ]
    assert AnnotationAssertion(BASE["part_of"], Annotation(RDF.type, OWL.ObjectProperty)) in document
    assert AnnotationAssertion(BASE["acme"], Annotation(RDF.type, BASE["Widget"])) in document


@pytest.mark.parametrize(
    "type_value, kind",
    [
        ("owl:Class", CLASS),
        ("owl:ObjectProperty", OBJECT_PROPERTY),
        ("owl:DatatypeProperty", DATA_PROPERTY),
        ("owl:AnnotationProperty", ANNOTATION_PROPERTY),
        ("rdfs:Datatype", DATATYPE),
        ("owl:Datatype", DATATYPE),
        ("owl:NamedIndividual", INDIVIDUAL),
        ("Widget", INDIVIDUAL),
    ],
)
def test_type_value_kinds(type_value, kind):
    tables = {"t": [["Id", "Type"], ["ID", "TYPE"], ["mytype", type_value]]}
    assert compile_tables(tables).entities() == [Entity(BASE["mytype"], kind)]


def test_conflicting_types_across_rows_declare_both_kinds():
    tables = {
        "t": [
            ["Id", "Type"],
            ["ID", "TYPE"],
            ["dual", "owl:Class"],
            ["dual", "owl:NamedIndividual"],
        ]
    }
    assert compile_tables(tables).entities() == [
        Entity(BASE["dual"], CLASS),
        Entity(BASE["dual"], INDIVIDUAL),
    ]


def test_blank_and_short_rows_are_skipped():
    tables = {
        "t": [
            ["Id", "Label"],
            ["ID", "A rdfs:label"],
            ["", "ignored"],
            [None, "ignored"],
            ["   "],
            [],
            ["X1"],
        ]
    }
    document = compile_tables(tables)
    assert document.axioms == [Declaration(Entity(BASE["X1"], CLASS))]


def test_entity_declared_once():
    tables = {
        "a": [["Id"], ["ID"], ["X1"]],
        "b": [["Id"], ["ID"], ["X1"]],
    }
    assert len(compile_tables(tables)) == 1


def test_cross_table_resolution_by_label():
    tables = {
        "parts": [
            ["Id", "Part of"],
            ["ID", "C part_of some %"],
            ["A1", "Widget"],
            ["A2", "Y1"],
        ],
        "properties": PROPERTIES,
        "widgets": [
            ["Id", "Label"],
            ["ID", "A rdfs:label"],
            ["Y1", "Widget"],
        ],
    }
    document = compile_tables(tables)
    expected = Restriction(SOME, BASE["part_of"], NamedClass(BASE["Y1"]))
    assert document.of_type(SubClassOf) == [
        SubClassOf(BASE["A1"], expected),
        SubClassOf(BASE["A2"], expected),
    ]


def test_placeholder_values_with_spaces_are_quoted():
    tables = {
        "t": [
            ["Id", "Label", "Parent"],
            ["ID", "A rdfs:label", "C %"],
            ["Y1", "Big Widget", ""],
            ["X1", "", "Big Widget"],
        ]
    }
    document = compile_tables(tables)
    assert document.of_type(SubClassOf) == [SubClassOf(BASE["X1"], NamedClass(BASE["Y1"]))]


def test_split_class_expressions_and_references():
    tables = {
        "t": [
            ["Id", "Parents", "Refs"],
            ["ID", "C % SPLIT=|", "CI SPLIT=,"],
            ["P1", "", ""],
            ["P2", "", ""],
            ["X1", "P1|P2", "obo:GO_1, obo:GO_2"],
        ]
    }
    document = compile_tables(tables)
    obo = "http://purl.obolibrary.org/obo/"
    assert document.of_type(SubClassOf) == [
        SubClassOf(BASE["X1"], NamedClass(BASE["P1"])),
        SubClassOf(BASE["X1"], NamedClass(BASE["P2"])),
        SubClassOf(BASE["X1"], NamedClass(URIRef(obo + "GO_1"))),
        SubClassOf(BASE["X1"], NamedClass(URIRef(obo + "GO_2"))),
    ]


@pytest.mark.parametrize("class_type", ["equivalent", "Equivalent", " EQUIVALENT "])
def test_equivalent_mode_is_case_insensitive(class_type):
    tables = {
        "t": [
            ["Id", "Mode", "Parent", "Part of"],
            ["ID", "CLASS_TYPE", "C %", "C part_of some %"],
            ["P1", "", "", ""],
            ["X1", class_type, "P1", "P1"],
        ],
        "properties": PROPERTIES,
    }
    document = compile_tables(tables)
    assert document.of_type(EquivalentClasses) == [
        EquivalentClasses(
            BASE["X1"],
            ObjectIntersectionOf(
                (NamedClass(BASE["P1"]), Restriction(SOME, BASE["part_of"], NamedClass(BASE["P1"])))
            ),
        )
    ]
    assert document.of_type(SubClassOf) == []


def test_equivalent_single_expression_is_not_wrapped():
    tables = {
        "t": [
            ["Id", "Mode", "Parent"],
            ["ID", "CLASS_TYPE", "C %"],
            ["P1", "", ""],
            ["X1", "equivalent", "P1"],
        ]
    }
    document = compile_tables(tables)
    assert document.of_type(EquivalentClasses) == [EquivalentClasses(BASE["X1"], NamedClass(BASE["P1"]))]


def test_equivalent_without_expressions_adds_nothing(caplog):
    tables = {"t": [["Id", "Mode"], ["ID", "CLASS_TYPE"], ["X1", "equivalent"]]}
    with caplog.at_level(logging.WARNING, logger="ontology.template"):
        document = compile_tables(tables)
    assert document.of_type(EquivalentClasses) == []
    assert "no class expressions" in caplog.text


def test_subclass_without_expressions_is_legal():
    tables = {"t": [["Id", "Mode"], ["ID", "CLASS_TYPE"], ["X1", "subclass"]]}
    assert compile_tables(tables).of_type(SubClassOf) == []


def test_base_graph_names_are_visible():
    base = Graph()
    gear = URIRef("http://example.org/Gear")
    base.add((gear, RDF.type, OWL.Class))
    base.add((gear, RDFS.label, Literal("toothed gear")))
    tables = {"t": [["Id", "Parent"], ["ID", "C %"], ["X1", "toothed gear"]]}
    document = compile_tables(tables, base)
    assert document.of_type(SubClassOf) == [SubClassOf(BASE["X1"], NamedClass(gear))]
    # entities of the base graph are not redeclared
    assert document.entities() == [Entity(BASE["X1"], CLASS)]


def test_ontology_iri_and_prefixes():
    resolver = IriResolver({"ex": "http://example.org/"}, base="http://example.org/")
    compiler = TemplateCompiler(resolver, ontology_iri="http://example.org/onto")
    document = compiler.compile({"t": [["Id"], ["ID"], ["W1"]]})
    assert document.iri == URIRef("http://example.org/onto")
    assert document.prefixes["ex"] == "http://example.org/"
    assert document.entities() == [Entity(URIRef("http://example.org/W1"), CLASS)]


# -- errors ------------------------------------------------------------------


def test_header_template_mismatch():
    tables = {"t": [["Id", "Label"], ["ID"], ["X1", "x"]]}
    with pytest.raises(StructuralMismatchError) as err:
        compile_tables(tables)
    assert err.value.table == "t"
    assert "(2)" in str(err.value) and "(1)" in str(err.value)


def test_table_without_template_row():
    with pytest.raises(StructuralMismatchError):
        compile_tables({"t": [["Id"]]})


def test_malformed_table_prevents_any_output():
    good = {"good": [["Id"], ["ID"], ["X1"]]}
    bad = {"bad": [["Id", "Label"], ["ID"]]}
    compiler = TemplateCompiler()
    with pytest.raises(StructuralMismatchError):
        compiler.compile({**good, **bad})


@pytest.mark.parametrize(
    "templates",
    [["A rdfs:label", "TYPE"], ["ID", "ID"]],
)
def test_identifier_column_count(templates):
    tables = {"t": [["First", "Second"], templates, ["X1", "X2"]]}
    with pytest.raises(MissingIdentifierColumnError) as err:
        compile_tables(tables)
    assert err.value.table == "t"


def test_unknown_template_context():
    tables = {"t": [["Id", "Weird"], ["ID", "FOO bar"], ["X1", "x"]]}
    with pytest.raises(UnknownTemplateError) as err:
        compile_tables(tables)
    assert err.value.context() == {
        "table": "t",
        "row": None,
        "column": 2,
        "header": "Weird",
        "value": "FOO bar",
        "row_id": None,
    }
    assert 'column 2 ("Weird")' in str(err.value)


def test_identifier_error():
    tables = {"t": [["Id"], ["ID"], ["X1"], ["has space"]]}
    with pytest.raises(IdentifierError) as err:
        compile_tables(tables)
    assert err.value.row == 4
    assert err.value.value == "has space"
    assert err.value.table == "t"


def test_unresolvable_class_reference():
    tables = {"t": [["Id", "Ref"], ["ID", "CI"], ["X1", "nope:Thing"]]}
    with pytest.raises(IdentifierError) as err:
        compile_tables(tables)
    assert err.value.column == 2
    assert err.value.row_id == "X1"


def test_unresolvable_annotation_property():
    tables = {"t": [["Id", "Note"], ["ID", "A nope:note"], ["X1", "text"]]}
    with pytest.raises(NameResolutionError) as err:
        compile_tables(tables)
    assert err.value.name == "nope:note"
    assert (err.value.row, err.value.column, err.value.header) == (3, 2, "Note")


def test_expression_parse_error_context():
    tables = {
        "t": [
            ["Id", "Part of"],
            ["ID", "C part_of some %"],
            ["X1", "Nonexistent"],
        ],
        "properties": PROPERTIES,
    }
    with pytest.raises(ExpressionParseError) as err:
        compile_tables(tables)
    error = err.value
    assert error.expression == "part_of some Nonexistent"
    assert (error.table, error.row, error.column, error.row_id) == ("t", 3, 2, "X1")
    assert "Nonexistent" in error.detail


def test_unknown_class_type_aborts_compilation():
    tables = {
        "t": [
            ["Id", "Mode"],
            ["ID", "CLASS_TYPE"],
            ["X1", "subclass"],
            ["X2", "overlaps"],
        ]
    }
    with pytest.raises(UnknownClassTypeError) as err:
        compile_tables(tables)
    assert err.value.value == "overlaps"
    assert (err.value.row, err.value.row_id, err.value.column) == (4, "X2", 2)


def test_missing_class_type_without_default():
    tables = {
        "t": [
            ["Id", "Mode", "Parent"],
            ["ID", "CLASS_TYPE", "C %"],
            ["P1", "subclass", ""],
            ["X1", "", "P1"],
        ]
    }
    compiler = TemplateCompiler(default_class_type=None)
    with pytest.raises(MissingClassTypeError) as err:
        compiler.compile(tables)
    assert (err.value.row, err.value.row_id) == (4, "X1")


def test_invalid_default_class_type():
    with pytest.raises(ValueError):
        TemplateCompiler(default_class_type="overlaps")


# -- list_identifiers ----------------------------------------------------------


def test_list_identifiers_is_idempotent():
    tables = {
        "a": [["Id"], ["ID"], ["X1"], [""], ["X2"]],
        "b": [["Label", "Id"], ["A rdfs:label", "ID"], ["l", "ex:Y"], ["l", "has space"]],
    }
    resolver = IriResolver({"ex": "http://example.org/"})
    first = list_identifiers(tables, resolver)
    assert first == [BASE["X1"], BASE["X2"], URIRef("http://example.org/Y")]
    assert list_identifiers(tables, resolver) == first

    compiler = TemplateCompiler(resolver)
    before = compiler.compile({"a": tables["a"]}).axioms
    compiler.list_identifiers(tables)
    assert compiler.compile({"a": tables["a"]}).axioms == before


def test_load_table_finds_identifier_column():
    table = load_table("t", [["Label", "Id"], ["A rdfs:label", "ID"], ["x", " X1 "]])
    assert table.id_column == 1
    assert [(n, table.identifier(r)) for n, r in table.data_rows()] == [(3, "X1")]
