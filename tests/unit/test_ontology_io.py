from rdflib import OWL, RDF, Graph, URIRef

from adapter.ontology_io import load_ontology, save_ontology

X = URIRef("http://example.org/X")


def _graph():
    g = Graph()
    g.add((X, RDF.type, OWL.Class))
    return g


def test_save_and_load_by_suffix(tmp_path):
    path = tmp_path / "out.ttl"
    assert save_ontology(_graph(), path) == "turtle"
    assert (X, RDF.type, OWL.Class) in load_ontology(path)


def test_save_rdfxml_for_owl_suffix(tmp_path):
    path = tmp_path / "out.owl"
    assert save_ontology(_graph(), path) == "xml"
    assert (X, RDF.type, OWL.Class) in load_ontology(str(path))


def test_save_defaults_to_turtle(tmp_path):
    assert save_ontology(_graph(), tmp_path / "out.unknown") == "turtle"


def test_load_from_uploaded_bytes():
    data = _graph().serialize(format="turtle").encode("utf-8")
    assert (X, RDF.type, OWL.Class) in load_ontology(data, name="base.ttl")
