# tests/test_rules.py
import pytest

from rdfa_core.rules import (
    RULES,
    Context,
    NewRelationRule,
    WrapBoth,
    WrapChildren,
    WrapSelf,
    WriteAttrs,
    decide,
)
from rdfa_core.terms import RDF_TYPE, BlankNode, NamedNode, Triple

S = NamedNode("http://example.org/s")
O = NamedNode("http://example.org/o")
X = NamedNode("http://example.org/x")
P = NamedNode("http://example.org/p")
T = NamedNode("http://example.org/T")


def ctx(subject, obj, has_rdfa=False, triple=None):
    return Context(triple=triple or Triple(S, P, O), subject=subject, object=obj, has_rdfa=has_rdfa)


def attrs(strategy):
    return [(w.kind, w.attr) for w in strategy.writes]


class TestTypeRules:
    def test_type_on_same_subject(self):
        s = decide(ctx(S, None, triple=Triple(S, NamedNode(RDF_TYPE), T)))
        assert isinstance(s, WriteAttrs)
        assert attrs(s) == [("curie", "typeof"), ("subject", "about")]

    def test_type_on_wrapper_when_rdfa_present(self):
        s = decide(ctx(X, S, has_rdfa=True, triple=Triple(S, NamedNode(RDF_TYPE), T)))
        assert isinstance(s, WrapChildren)
        assert s.returns_wrapper
        assert attrs(s) == [("curie", "typeof")]

    def test_type_on_wrapper_adds_about(self):
        s = decide(ctx(X, O, has_rdfa=True, triple=Triple(S, NamedNode(RDF_TYPE), T)))
        assert attrs(s) == [("curie", "typeof"), ("subject", "about")]

    def test_type_with_subject(self):
        s = decide(ctx(X, None, triple=Triple(S, NamedNode(RDF_TYPE), T)))
        assert isinstance(s, WriteAttrs)
        assert attrs(s) == [("curie", "typeof"), ("subject", "about")]


class TestRelationRules:
    def test_rel_when_both_match(self):
        s = decide(ctx(S, O, has_rdfa=True))
        assert isinstance(s, WriteAttrs)
        assert attrs(s) == [("curie", "rel")]

    def test_rel_with_object(self):
        s = decide(ctx(S, BlankNode("b1")))
        assert attrs(s) == [("curie", "rel"), ("object", "resource")]

    def test_rev_on_parent(self):
        s = decide(ctx(S, X, has_rdfa=True))
        assert isinstance(s, WrapSelf)
        assert [w.value for w in s.writes] == [P.uri, O, S]

    def test_rev(self):
        s = decide(ctx(O, S, has_rdfa=True))
        assert isinstance(s, WriteAttrs)
        assert attrs(s) == [("curie", "rev")]

    def test_rev_with_object(self):
        s = decide(ctx(O, X))
        assert attrs(s) == [("curie", "rev"), ("object", "resource")]

    def test_rel_on_parent(self):
        s = decide(ctx(O, X, has_rdfa=True))
        assert isinstance(s, WrapSelf)
        assert [w.value for w in s.writes] == [P.uri, S, O]

    def test_same_object_with_rdfa(self):
        s = decide(ctx(X, O, has_rdfa=True))
        assert isinstance(s, WrapBoth)
        assert [w.attr for w in s.wrapper] == ["rev", "resource"]
        assert [w.value for w in s.nested] == [O]

    def test_same_object_without_rdfa(self):
        s = decide(ctx(X, O))
        assert attrs(s) == [("subject", "about"), ("curie", "rel")]

    def test_object_is_subject_with_rdfa(self):
        s = decide(ctx(X, S, has_rdfa=True))
        assert isinstance(s, WrapBoth)
        assert [w.attr for w in s.wrapper] == ["rel", "resource"]
        assert [w.value for w in s.nested] == [S]

    def test_object_is_subject_without_rdfa(self):
        s = decide(ctx(X, S))
        assert attrs(s) == [("subject", "about"), ("curie", "rev")]
        assert s.writes[0].value == O

    def test_new_relation_on_wrapper(self):
        s = decide(ctx(X, X, has_rdfa=True))
        assert isinstance(s, WrapChildren)
        assert not s.returns_wrapper
        assert s.restore_subject == X

    def test_fallback(self):
        s = decide(ctx(X, None))
        assert isinstance(s, WriteAttrs)
        assert attrs(s) == [("curie", "rel"), ("subject", "about"), ("object", "resource")]
        assert s.restore_subject == X

    def test_restores_what_children_inherit(self):
        href = NamedNode("http://example.org/h")
        s = decide(Context(triple=Triple(S, P, O), subject=X, object=href, has_rdfa=False, inherited=href))
        assert isinstance(s, WriteAttrs)
        assert s.restore_subject == href


class TestRegistry:
    def test_last_rule_always_matches(self):
        assert isinstance(RULES[-1], NewRelationRule)

    def test_empty_registry(self):
        with pytest.raises(LookupError):
            decide(ctx(X, None), rules=[])
