# tests/test_synthesis.py
"""
Запись троек в дерево: после аннотации извлечение снова должно давать тройку,
а уже существующие тройки не должны теряться.
"""
import pytest

from conftest import BASE, EX, find_element
from rdfa_core.document import Document
from rdfa_core.errors import MalformedResourceReference
from rdfa_core.model_loader import to_markup
from rdfa_core.terms import RDF_TYPE, XML_LITERAL, XSD_NS, Literal, NamedNode, Triple

DOC = NamedNode(BASE)
A = NamedNode(BASE + "#a")
S = NamedNode(BASE + "#s")
O = NamedNode(BASE + "#o")
P = NamedNode(EX + "p")
Q = NamedNode(EX + "q")

HEAD = '<html xmlns:ex="http://example.org/ns#"{attrs}><body>{body}</body></html>'


def page(body: str, attrs: str = "") -> Document:
    return Document.from_markup(HEAD.format(attrs=attrs, body=body), base=BASE)


def reparsed(doc: Document):
    return Document.from_markup(doc.to_markup(), base=BASE).triples()


class TestLiterals:
    def test_plain_literal_matching_text(self):
        doc = page("<p>Hello</p>")
        p = find_element(doc.root, "p")
        t = Triple(DOC, P, Literal("Hello"))
        doc.add(t, p)
        assert to_markup(p) == '<p property="ex:p" datatype="">Hello</p>'
        assert t in doc.triples()
        assert t in reparsed(doc)

    def test_literal_with_other_text_uses_content(self):
        doc = page("<p>Hello</p>")
        p = find_element(doc.root, "p")
        doc.add(Triple(DOC, P, Literal("Bye")), p)
        assert to_markup(p) == '<p property="ex:p" content="Bye">Hello</p>'

    def test_language_literal_keeps_old_text_language(self):
        doc = page("<p>Hello</p>", attrs=' lang="en"')
        p = find_element(doc.root, "p")
        t = Triple(DOC, P, Literal("Hallo", lang="de"))
        doc.add(t, p)
        assert to_markup(p) == '<p property="ex:p" content="Hallo" lang="de"><span lang="en">Hello</span></p>'
        assert list(doc.triples()) == [t]

    def test_plain_literal_drops_inherited_language(self):
        doc = page("<p>Hello</p>", attrs=' lang="en"')
        p = find_element(doc.root, "p")
        t = Triple(DOC, P, Literal("Hello"))
        doc.add(t, p)
        assert p.get("lang") == ""
        assert list(doc.triples()) == [t]

    def test_typed_literal_declares_conventional_prefix(self):
        doc = page("<p>42</p>")
        p = find_element(doc.root, "p")
        t = Triple(DOC, P, Literal("42", datatype=XSD_NS + "integer"))
        doc.add(t, p)
        assert p.get("datatype") == "xsd:integer"
        assert p.get("xmlns:xsd") == XSD_NS
        assert t in reparsed(doc)

    def test_typed_literal_replaces_stale_datatype(self):
        doc = page('<p datatype="xsd:string">42</p>')
        p = find_element(doc.root, "p")
        t = Triple(DOC, P, Literal("42", datatype=XSD_NS + "integer"))
        doc.add(t, p)
        assert p.get("datatype") == "xsd:integer"
        assert list(doc.triples()) == [t]

    def test_xml_literal_replaces_children(self):
        doc = page("<p>Hello</p>")
        p = find_element(doc.root, "p")
        t = Triple(DOC, P, Literal("<b>x</b> y", datatype=XML_LITERAL))
        doc.add(t, p)
        assert p.get("datatype") == "rdf:XMLLiteral"
        assert p.get("xmlns:rdf") == "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
        assert list(doc.triples()) == [t]

    def test_xml_literal_in_serialized_form_round_trips(self):
        doc = page("<p>Hello</p>")
        t = Triple(DOC, P, Literal("a<br></br>b", datatype=XML_LITERAL))
        doc.add(t, find_element(doc.root, "p"))
        assert list(doc.triples()) == [t]
        assert t in reparsed(doc)

    def test_xml_literal_that_reads_back_differently_is_rejected(self):
        doc = page("<p>Hello</p>")
        before = doc.to_markup()
        with pytest.raises(MalformedResourceReference):
            doc.add(Triple(DOC, P, Literal("a<br/>b", datatype=XML_LITERAL)), find_element(doc.root, "p"))
        assert doc.to_markup() == before

    def test_xml_literal_under_default_namespace_needs_xmlns(self):
        doc = page("<p>Hello</p>", attrs=' xmlns="http://www.w3.org/1999/xhtml"')
        p = find_element(doc.root, "p")
        with pytest.raises(MalformedResourceReference):
            doc.add(Triple(DOC, P, Literal("<b>x</b>", datatype=XML_LITERAL)), p)
        t = Triple(DOC, P, Literal('<b xmlns="http://www.w3.org/1999/xhtml">x</b>', datatype=XML_LITERAL))
        doc.add(t, p)
        assert list(doc.triples()) == [t]

    def test_literal_about_link_target_goes_inside_link(self):
        doc = page('<a href="#s">Hello</a>')
        a = find_element(doc.root, "a")
        t = Triple(S, P, Literal("Hello"))
        doc.add(t, a)
        assert to_markup(a) == '<a href="#s"><span property="ex:p" datatype="">Hello</span></a>'
        assert list(doc.triples()) == [t]
        assert t in reparsed(doc)

    def test_unknown_namespace_gets_minted_prefix(self):
        doc = page("<p>v</p>")
        p = find_element(doc.root, "p")
        doc.add(Triple(DOC, NamedNode("http://other.org/vocab/name"), Literal("v")), p)
        assert p.get("xmlns:ns1") == "http://other.org/vocab/"
        assert p.get("property") == "ns1:name"

    def test_inexpressible_predicate_leaves_tree_untouched(self):
        doc = page("<p>v</p>")
        before = doc.to_markup()
        with pytest.raises(MalformedResourceReference):
            doc.add(Triple(DOC, NamedNode("urn:x"), Literal("v")), find_element(doc.root, "p"))
        assert doc.to_markup() == before

    def test_second_property_with_same_literal(self):
        doc = page('<p property="ex:p">Hello</p>')
        p = find_element(doc.root, "p")
        doc.add(Triple(DOC, Q, Literal("Hello")), p)
        assert p.get("property") == "ex:p ex:q"
        assert len(doc.triples()) == 2

    def test_second_property_with_other_literal_nests(self):
        doc = page('<p property="ex:p">Hello</p>')
        p = find_element(doc.root, "p")
        new = Triple(DOC, Q, Literal("Bye"))
        doc.add(new, p)
        assert to_markup(p) == (
            '<p property="ex:p" datatype=""><span property="ex:q" content="Bye">Hello</span></p>'
        )
        assert list(doc.triples()) == [Triple(DOC, P, Literal("Hello")), new]

    def test_other_subject(self):
        doc = page("<p>Hello</p>")
        t = Triple(S, P, Literal("Hello"))
        doc.add(t, find_element(doc.root, "p"))
        assert find_element(doc.root, "p").get("about") == "#s"
        assert list(doc.triples()) == [t]


class TestRelations:
    def test_relation_on_plain_node(self):
        doc = page("<p>Hello</p>")
        p = find_element(doc.root, "p")
        t = Triple(DOC, P, O)
        doc.add(t, p)
        assert to_markup(p) == '<p rel="ex:p" resource="#o">Hello</p>'
        assert list(doc.triples()) == [t]

    def test_type_on_plain_node(self):
        doc = page("<p>Hello</p>")
        p = find_element(doc.root, "p")
        t = Triple(DOC, NamedNode(RDF_TYPE), NamedNode(EX + "T"))
        doc.add(t, p)
        assert to_markup(p) == '<p typeof="ex:T" about="">Hello</p>'
        assert list(doc.triples()) == [t]

    def test_type_on_existing_rdfa_wraps_children(self):
        doc = page('<div about="#a" rel="ex:q" resource="#o"><i>t</i></div>')
        div = find_element(doc.root, "div")
        t = Triple(S, NamedNode(RDF_TYPE), NamedNode(EX + "T"))
        target = doc.add(t, div)
        assert target is not div
        assert target.parent is div
        assert t in doc.triples()
        assert Triple(A, Q, O) in doc.triples()

    def test_rev_on_wrapper_when_object_taken(self):
        doc = page('<a rel="ex:q" href="#o">x</a>')
        a = find_element(doc.root, "a")
        t = Triple(DOC, P, S)
        wrapper = doc.add(t, a)
        assert to_markup(wrapper) == (
            '<span rev="ex:p" about="#s" resource=""><a rel="ex:q" href="#o">x</a></span>'
        )
        assert list(doc.triples()) == [t, Triple(DOC, Q, O)]

    def test_rev_between_existing_subject_and_object(self):
        doc = page('<div about="#o"><a href="#s">x</a></div>')
        a = find_element(doc.root, "a")
        t = Triple(S, P, O)
        doc.add(t, a)
        assert a.get("rev") == "ex:p"
        assert list(doc.triples()) == [t]

    def test_same_object_without_rdfa(self):
        doc = page('<a href="#o">x</a>')
        a = find_element(doc.root, "a")
        t = Triple(S, P, O)
        doc.add(t, a)
        assert to_markup(a) == '<a href="#o" about="#s" rel="ex:p">x</a>'
        assert list(doc.triples()) == [t]

    def test_object_is_subject_without_rdfa(self):
        doc = page('<a href="#s">x</a>')
        a = find_element(doc.root, "a")
        t = Triple(S, P, O)
        doc.add(t, a)
        assert to_markup(a) == '<a href="#s" about="#o" rev="ex:p">x</a>'
        assert list(doc.triples()) == [t]

    def test_same_object_with_rdfa_uses_double_wrapper(self):
        doc = page('<div about="#a" rel="ex:q" resource="#o"><p property="ex:p">v</p></div>')
        div = find_element(doc.root, "div")
        t = Triple(S, P, O)
        doc.add(t, div)
        triples = doc.triples()
        assert t in triples
        assert Triple(A, Q, O) in triples
        # ребёнок сохраняет прежний субъект
        assert Triple(O, P, Literal("v")) in triples
        assert len(triples) == 3

    def test_fallback_restores_subject_for_children(self):
        doc = page('<div about="#a"><p>text <b>x</b></p></div>')
        p = find_element(doc.root, "p")
        t = Triple(S, P, O)
        doc.add(t, p)
        assert to_markup(p) == (
            '<p rel="ex:p" about="#s" resource="#o"><span about="#a">text <b>x</b></span></p>'
        )
        assert list(doc.triples()) == [t]
        assert t in reparsed(doc)

    def test_new_relation_on_node_with_rdfa(self):
        doc = page('<div about="#a"><p property="ex:q">v</p></div>')
        p = find_element(doc.root, "p")
        t = Triple(S, P, O)
        doc.add(t, p)
        triples = doc.triples()
        assert t in triples
        assert Triple(A, Q, Literal("v")) in triples
        assert len(triples) == 2

    def test_new_relation_keeps_subject_inherited_from_link(self):
        doc = page('<div about="#a"><a href="#h"><span property="ex:q">v</span></a></div>')
        a = find_element(doc.root, "a")
        t = Triple(S, P, O)
        doc.add(t, a)
        h = NamedNode(BASE + "#h")
        assert list(doc.triples()) == [t, Triple(h, Q, Literal("v"))]
        assert t in reparsed(doc)

    def test_rel_on_wrapper_of_annotated_node(self):
        doc = page('<div about="#o"><a rel="ex:q" href="#x">x</a></div>')
        div = find_element(doc.root, "div")
        t = Triple(S, P, O)
        wrapper = doc.add(t, find_element(doc.root, "a"))
        assert wrapper.parent is div
        assert to_markup(wrapper) == (
            '<span rel="ex:p" about="#s" resource="#o"><a rel="ex:q" href="#x">x</a></span>'
        )
        assert list(doc.triples()) == [t, Triple(O, Q, NamedNode(BASE + "#x"))]
        assert t in reparsed(doc)


class TestDocumentLevel:
    def test_add_statement_string_to_body(self):
        doc = page("")
        doc.add('<#s> ex:p "v"@en .')
        assert list(doc.triples()) == [Triple(S, P, Literal("v", lang="en"))]

    def test_change_notification(self):
        doc = page("<p>Hello</p>")
        seen = []
        doc.subscribe(seen.append)
        p = find_element(doc.root, "p")
        doc.add(Triple(DOC, P, Literal("Hello")), p)
        assert seen == [p]

    def test_many_triples_round_trip(self, person_doc):
        added = [
            person_doc.parse_statement('<#jo> foaf:nick "jojo" .'),
            person_doc.parse_statement("<#bob> a foaf:Person ."),
            person_doc.parse_statement("<#bob> foaf:knows <#jo> ."),
        ]
        before = list(person_doc.triples())
        person_doc.add_all(added)
        after = person_doc.triples()
        for t in before + added:
            assert t in after
        assert after == reparsed(person_doc)


class TestProperties:
    def test_type_on_node_with_property_wraps_children(self):
        doc = page('<div about="#a"><p property="ex:q">v</p></div>')
        p = find_element(doc.root, "p")
        t = Triple(S, NamedNode(RDF_TYPE), NamedNode(EX + "T"))
        target = doc.add(t, p)
        assert target.parent is p
        assert target.get("typeof") == "ex:T"
        assert list(doc.triples()) == [Triple(A, Q, Literal("v")), t]

    @pytest.mark.parametrize("triple", [
        Triple(DOC, P, O),
        Triple(DOC, P, Literal("Hello")),
        Triple(DOC, NamedNode(RDF_TYPE), NamedNode(EX + "T")),
    ])
    def test_applying_twice_changes_nothing(self, triple):
        doc = page("<p>Hello</p>")
        p = find_element(doc.root, "p")
        doc.add(triple, p)
        once = doc.to_markup()
        doc.add(triple, p)
        assert doc.to_markup() == once
        assert list(doc.triples()) == [triple]

    def test_warm_and_cold_after_annotation(self):
        doc = page('<div about="#a"><p>text <b>x</b></p></div>')
        doc.add(Triple(S, P, O), find_element(doc.root, "p"))
        doc.add(Triple(S, NamedNode(RDF_TYPE), NamedNode(EX + "T")), find_element(doc.root, "b"))
        warm = doc.triples()
        doc.invalidate()
        assert doc.triples() == warm
