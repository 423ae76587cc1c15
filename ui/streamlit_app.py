"""
Interfaz: UI Streamlit para compilar plantillas tabulares a una ontología OWL.
"""
import streamlit as st
import sys
import os

# Añadir la raíz del proyecto al sys.path para asegurar la detección de módulos
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from adapter.csv_loader import read_tables
from adapter.manchester_parser import ClassExpressionParser
from adapter.ontology_io import load_ontology
from ontology.errors import TemplateError
from ontology.iri import IriResolver
from ontology.model import AnnotationAssertion, Declaration, EquivalentClasses, SubClassOf
from ontology.template import TemplateCompiler


# --- Parser de expresiones reutilizable ---
@st.cache_resource
def get_parser() -> ClassExpressionParser:
    """Return a cached class expression parser."""
    return ClassExpressionParser()


def construir_resolver(texto_prefijos: str, base_iri: str) -> IriResolver:
    """Crea el resolver con los prefijos escritos como ``prefijo: IRI`` (uno por línea)."""
    resolver = IriResolver(base=base_iri.strip() or None)
    for linea in texto_prefijos.splitlines():
        if linea.strip():
            resolver.add_prefix_line(linea)
    return resolver


def resumen_axiomas(document) -> dict:
    return {
        "Declaraciones": len(document.of_type(Declaration)),
        "Anotaciones": len(document.of_type(AnnotationAssertion)),
        "SubClassOf": len(document.of_type(SubClassOf)),
        "EquivalentClasses": len(document.of_type(EquivalentClasses)),
    }


def main():
    """
    Orquesta la carga de plantillas, la compilación y la descarga del resultado.
    """
    st.title("Plantillas a OWL")
    st.sidebar.info("Flujo: sube las plantillas, revisa los prefijos y compila.")

    # --- 1. Plantillas y ontología base ---
    st.header("1. Plantillas")
    plantillas = st.file_uploader(
        "Sube una o varias plantillas (CSV, TSV, Excel)",
        type=["csv", "tsv", "tab", "xlsx", "xls"],
        accept_multiple_files=True,
        key="plantillas",
    )
    ontologia_base = st.file_uploader(
        "Ontología base opcional (entidades y etiquetas conocidas)",
        type=["owl", "ttl", "rdf", "xml", "nt", "jsonld"],
        key="ontologia_base",
    )

    # --- 2. Prefijos ---
    st.header("2. Prefijos")
    base_iri = st.text_input("IRI base para identificadores sin prefijo", value=IriResolver().base)
    ontology_iri = st.text_input("IRI de la ontología generada", value="")
    texto_prefijos = st.text_area("Prefijos adicionales (prefijo: IRI)", value="", key="prefijos")

    if not plantillas:
        st.info("Sube al menos una plantilla para compilar.")
        return

    if st.button("Compilar"):
        try:
            resolver = construir_resolver(texto_prefijos, base_iri)
            tablas = read_tables(plantillas)
            base_graph = None
            if ontologia_base is not None:
                base_graph = load_ontology(ontologia_base.getvalue(), name=ontologia_base.name)
            compiler = TemplateCompiler(
                resolver, get_parser(), ontology_iri=ontology_iri.strip() or None
            )
            document = compiler.compile(tablas, base_graph)
        except TemplateError as e:
            st.error(str(e))
            st.stop()
        except ValueError as e:
            st.error(f"Error al leer la entrada: {e}")
            st.stop()

        # --- 3. Resultado ---
        st.header("3. Resultado")
        st.table(resumen_axiomas(document))
        turtle = document.to_graph().serialize(format="turtle")
        with st.expander("Turtle", expanded=False):
            st.code(turtle)
        st.download_button(
            label="Descargar ontología (Turtle)",
            data=turtle.encode("utf-8"),
            file_name="ontologia.ttl",
            mime="text/turtle",
        )
        st.success("¡Ontología compilada con éxito!")


if __name__ == "__main__":
    main()
