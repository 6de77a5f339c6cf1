"""Tests for tree-to-token encoding."""

import pytest

from xml_nodes.shared.errors import EncodeError, EncodeNameError
from xml_nodes.tokenization import MarkupTokenizer, MarkupWriter, Token
from xml_nodes.tree.decoder import decode
from xml_nodes.tree.encoder import NodeEncoder, encode, iter_tokens
from xml_nodes.tree.nodes import Attr, Comment, Decl, Elem, Name, Pi, Text


class RecordingSink:
    """Sink that keeps every token it is given."""

    def __init__(self):
        self.tokens = []

    def write_token(self, token):
        self.tokens.append(token)


def to_markup(nodes):
    writer = MarkupWriter()
    encode(nodes, writer)
    writer.close()
    return writer.getvalue()


def cycle(markup):
    return to_markup(decode(MarkupTokenizer(markup)))


class TestIterTokens:
    """Tests for the emitted token stream."""

    def test_document_order(self):
        """Test that elements, attributes and children come out in order."""
        tree = (
            Pi("xml", 'version="1.0"'),
            Decl("DOCTYPE one"),
            Elem(
                Name("", "one"),
                (Attr(Name("", "b"), "1"), Attr(Name("", "a"), "2")),
                (Text("x"), Comment("y"), Elem(Name("", "two"))),
            ),
        )

        assert list(iter_tokens(tree)) == [
            Token.processing_instruction("xml", 'version="1.0"'),
            Token.directive("DOCTYPE one"),
            Token.start_element(
                Name("", "one"),
                (Attr(Name("", "b"), "1"), Attr(Name("", "a"), "2")),
            ),
            Token.char_data("x"),
            Token.comment("y"),
            Token.start_element(Name("", "two")),
            Token.end_element(Name("", "two")),
            Token.end_element(Name("", "one")),
        ]

    def test_single_node(self):
        assert list(iter_tokens(Text("x"))) == [Token.char_data("x")]

    def test_namespace_suppression(self):
        """Test that a tag already declaring its own default namespace is emitted unqualified."""
        elem = Elem(Name("u", "a"), (Attr(Name("", "xmlns"), "u"),))

        tokens = list(iter_tokens(elem))

        assert tokens[0].name == Name("", "a")
        assert tokens[0].attrs == (Attr(Name("", "xmlns"), "u"),)
        assert tokens[1].name == Name("", "a")
        # The tree itself is left alone
        assert elem.name == Name("u", "a")

    def test_no_suppression_for_other_values(self):
        elem = Elem(Name("u", "a"), (Attr(Name("", "xmlns"), "v"),))

        assert list(iter_tokens(elem))[0].name == Name("u", "a")

    def test_no_suppression_for_prefixed_binding(self):
        elem = Elem(Name("u", "a"), (Attr(Name("xmlns", "p"), "u"),))

        assert list(iter_tokens(elem))[0].name == Name("u", "a")

    def test_deep_tree(self):
        """Test that trees nested beyond the recursion limit encode."""
        depth = 5000
        node = Elem(Name("", "leaf"))
        for _ in range(depth - 1):
            node = Elem(Name("", "e"), (), (node,))

        assert sum(1 for _ in iter_tokens(node)) == 2 * depth


class TestEncodeErrors:
    """Tests for trees that cannot be encoded."""

    def test_empty_element_name(self):
        """Test that an unnamed element fails and leaves the sink untouched."""
        sink = RecordingSink()
        tree = (
            Text("before"),
            Elem(Name("", "ok"), (), (Elem(Name("urn:u", "")),)),
        )

        with pytest.raises(EncodeNameError, match="Elem") as exc_info:
            encode(tree, sink)

        assert isinstance(exc_info.value, EncodeError)
        assert sink.tokens == []

    def test_empty_instruction_target(self):
        sink = RecordingSink()

        with pytest.raises(EncodeNameError, match="empty target"):
            encode([Comment("c"), Pi("", "content")], sink)

        assert sink.tokens == []

    def test_no_markup_written(self):
        """Test that a failed encode produces no output bytes."""
        writer = MarkupWriter()

        with pytest.raises(EncodeNameError):
            encode([Text("x"), Elem()], writer)

        assert writer.getvalue() == ""

    @pytest.mark.parametrize("value", ["<a/>", b"<a/>", 42, [Name("", "a")]])
    def test_non_nodes(self, value):
        with pytest.raises(TypeError):
            encode(value, RecordingSink())  # type: ignore[arg-type]


class TestEncodeToSink:
    """Tests for encoding into sinks."""

    def test_returns_token_count(self):
        sink = RecordingSink()

        count = NodeEncoder().encode([Elem(Name("", "a"), (), (Text("x"),))], sink)

        assert count == 3
        assert len(sink.tokens) == 3

    def test_simple_fixture_byte_identical(self, simple_xml, simple_nodes):
        """Test that the canonical document re-encodes byte for byte."""
        assert to_markup(simple_nodes) == simple_xml

    def test_markup_round_trip(self, simple_xml, simple_nodes):
        assert decode(MarkupTokenizer(to_markup(simple_nodes))) == simple_nodes

    def test_inlined_namespaces(self, test_data_dir, ns_inlined_nodes):
        """Test that declared default namespaces are not repeated on the tag."""
        expected = (test_data_dir / "ns_out.xml").read_text(encoding="utf-8")

        assert to_markup(ns_inlined_nodes) == expected

    def test_aliased_namespaces(self, ns_aliased_nodes):
        """Test that prefixed names are written with default declarations."""
        assert to_markup(ns_aliased_nodes) == (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            '<one xmlns="ns_outer" xmlns:outer="ns_outer" two="three">\n'
            '  <four xmlns="ns_outer"></four>\n'
            '  <five xmlns="ns_inner" xmlns:inner="ns_inner" six="seven"></five>\n'
            '</one>'
        )

    def test_no_xmlns_growth_over_cycles(self, test_data_dir):
        """Test that repeated decode/encode cycles reach a fixed point."""
        inlined = (test_data_dir / "ns_inlined.xml").read_text(encoding="utf-8")
        aliased = (test_data_dir / "ns_aliased.xml").read_text(encoding="utf-8")

        first = cycle(inlined)
        markup = first
        for _ in range(5):
            markup = cycle(markup)
        assert markup == first

        first = cycle(aliased)
        markup = first
        for _ in range(5):
            markup = cycle(markup)
        assert markup == first
        assert first.count('xmlns="ns_outer"') == 2

    def test_literal_prefix_stable_over_cycles(self):
        """Test that a literal xmlns:p binding is reused rather than declared twice."""
        markup = '<r xmlns:a="http://foo/a" a:b="1"></r>'

        for _ in range(5):
            markup = cycle(markup)

        assert markup == '<r xmlns:a="http://foo/a" a:b="1"></r>'

    def test_no_namespace_child_keeps_namespace(self):
        """Test that a child without a namespace stays out of its parent's namespace."""
        first = cycle('<x:a xmlns:x="uri"><b></b></x:a>')

        assert first == '<a xmlns="uri" xmlns:x="uri"><b xmlns=""></b></a>'
        (root,) = decode(MarkupTokenizer(first))
        assert root.name == Name("uri", "a")
        assert root.nodes[0].name == Name("", "b")

        markup = first
        for _ in range(5):
            markup = cycle(markup)
        assert markup == first
