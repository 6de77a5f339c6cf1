"""Tests for the tagged JSON representation."""

import json

import pytest

from xml_nodes.shared.config import JsonConfig
from xml_nodes.shared.errors import (
    JsonCodecError,
    JsonDepthError,
    JsonMissingDiscriminatorError,
    JsonShapeError,
    JsonUnknownDiscriminatorError,
)
from xml_nodes.tree import json_codec
from xml_nodes.tree.nodes import Attr, Comment, Decl, Elem, Name, Pi, Text

SCENARIO_NODES = (
    Pi("xml", 'version="1.0"'),
    Text("\n"),
    Elem(Name("", "one"), (Attr(Name("", "two"), "three"),), (Text("\n  four\n"),)),
    Text("\n"),
)


class TestToData:
    """Tests for converting trees to JSON values."""

    def test_scenario_document(self):
        """Test the tagged array for a small document."""
        assert json_codec.to_data(SCENARIO_NODES) == [
            {"type": "pi", "target": "xml", "content": 'version="1.0"'},
            {"type": "text", "content": "\n"},
            {
                "type": "elem",
                "name": {"local": "one"},
                "attrs": [{"name": {"local": "two"}, "value": "three"}],
                "nodes": [{"type": "text", "content": "\n  four\n"}],
            },
            {"type": "text", "content": "\n"},
        ]

    def test_empty_fields_omitted(self):
        """Test that empty strings and sequences are left out."""
        assert json_codec.to_data([Elem(), Text(), Pi(), Decl(), Comment()]) == [
            {"type": "elem"},
            {"type": "text"},
            {"type": "pi"},
            {"type": "decl"},
            {"type": "comment"},
        ]

    def test_namespaced_names(self):
        data = json_codec.node_to_data(
            Elem(Name("u", "a"), (Attr(Name("xmlns", "p"), "u"), Attr(Name("", "b"))))
        )

        assert data == {
            "type": "elem",
            "name": {"space": "u", "local": "a"},
            "attrs": [{"name": {"space": "xmlns", "local": "p"}, "value": "u"}, {"name": {"local": "b"}}],
        }

    def test_type_comes_first(self):
        keys = list(json_codec.node_to_data(Pi("t", "c")))

        assert keys == ["type", "target", "content"]

    def test_single_node_is_object(self):
        assert json_codec.to_data(Comment("c")) == {"type": "comment", "content": "c"}

    def test_non_node_rejected(self):
        with pytest.raises(TypeError):
            json_codec.node_to_data(Name("", "a"))  # type: ignore[arg-type]


class TestDumps:
    """Tests for JSON text output."""

    def test_simple_fixture_byte_identical(self, simple_nodes, simple_json):
        """Test that the canonical tree serializes to the fixture exactly."""
        assert json_codec.dumps(simple_nodes) == simple_json

    def test_compact(self):
        text = json_codec.dumps([Text("x")], JsonConfig(indent=None))

        assert text == '[{"type":"text","content":"x"}]'

    def test_non_ascii_kept(self):
        assert json_codec.dumps(Text("é"), JsonConfig(indent=None)) == '{"type":"text","content":"é"}'

    def test_ensure_ascii(self):
        config = JsonConfig(indent=None, ensure_ascii=True)

        assert json_codec.dumps(Text("é"), config) == '{"type":"text","content":"\\u00e9"}'


class TestFromData:
    """Tests for converting JSON values to trees."""

    def test_simple_fixture(self, simple_nodes, simple_json):
        """Test that the fixture decodes to the canonical tree and back."""
        nodes = json_codec.loads(simple_json)

        assert nodes == simple_nodes
        assert json_codec.dumps(nodes) == simple_json

    def test_round_trip_every_kind(self, ns_aliased_nodes):
        tree = ns_aliased_nodes + (Decl("DOCTYPE a"), Comment(""), Elem(Name("", "e"), (Attr(),)))

        assert json_codec.from_data(json_codec.to_data(tree)) == tree

    def test_absent_and_null_fields(self):
        """Test that missing, null and empty fields all decode as empty."""
        nodes = json_codec.from_data([
            {"type": "elem", "name": None, "attrs": None, "nodes": None},
            {"type": "elem", "name": {}, "attrs": [], "nodes": []},
            {"type": "pi", "target": None},
            {"type": "text"},
        ])

        assert nodes == (Elem(), Elem(), Pi(), Text())

    def test_unknown_fields_ignored(self):
        node = json_codec.node_from_data({"type": "text", "content": "x", "extra": 1})

        assert node == Text("x")

    def test_null_sequence(self):
        assert json_codec.from_data(None) == ()

    def test_loads_node(self):
        assert json_codec.loads_node('{"type": "decl", "content": "DOCTYPE a"}') == Decl("DOCTYPE a")


class TestFromDataErrors:
    """Tests for malformed tagged JSON."""

    @pytest.mark.parametrize("data", [{}, {"type": ""}, {"type": None}, {"content": "x"}])
    def test_missing_discriminator(self, data):
        """Test that a missing type names the offending raw object."""
        with pytest.raises(JsonMissingDiscriminatorError, match='required field "type" is missing') as exc_info:
            json_codec.node_from_data(data)

        assert exc_info.value.raw == json.dumps(data, separators=(",", ":"))

    def test_unknown_discriminator(self):
        with pytest.raises(JsonUnknownDiscriminatorError, match="unrecognized node type 'cdata'") as exc_info:
            json_codec.loads('[{"type": "cdata", "content": "x"}]')

        assert exc_info.value.value == "cdata"

    def test_discriminator_errors_are_value_errors(self):
        """Test that callers catching ValueError see codec errors."""
        with pytest.raises(ValueError):
            json_codec.node_from_data({"type": "bogus"})

    def test_nested_missing_discriminator(self):
        with pytest.raises(JsonMissingDiscriminatorError):
            json_codec.from_data([{"type": "elem", "nodes": [{"content": "x"}]}])

    @pytest.mark.parametrize("data", [
        [1],
        {"type": "text"},
        [{"type": 3}],
        [{"type": "text", "content": 5}],
        [{"type": "elem", "name": "a"}],
        [{"type": "elem", "attrs": {"name": {}}}],
        [{"type": "elem", "attrs": ["a"]}],
        [{"type": "elem", "nodes": "x"}],
        [{"type": "elem", "name": {"local": ["a"]}}],
    ])
    def test_shape_errors(self, data):
        with pytest.raises(JsonShapeError) as exc_info:
            json_codec.from_data(data)

        assert isinstance(exc_info.value, JsonCodecError)

    def test_invalid_json_text(self):
        with pytest.raises(json.JSONDecodeError):
            json_codec.loads("[{")


def nested(depth):
    """Chain of ``depth`` elements ending in a text node."""
    node = Elem(Name("", "leaf"), (), (Text("x"),))
    for level in range(depth - 1):
        node = Elem(Name("urn:e", f"e{level}"), (Attr(Name("", "n"), str(level)),), (node,))
    return node


def chain_length(node):
    length = 0
    while isinstance(node, Elem):
        length += 1
        (node,) = node.nodes
    assert node == Text("x")
    return length


class TestDeepTrees:
    """Tests for trees nested beyond the recursion limit."""

    def test_data_round_trip(self):
        """Test that conversion to and from JSON values does not recurse."""
        depth = 5000
        data = json_codec.to_data([nested(depth)])

        (root,) = json_codec.from_data(data)

        assert chain_length(root) == depth
        assert root.name == Name("urn:e", f"e{depth - 2}")
        assert root.attrs == (Attr(Name("", "n"), str(depth - 2)),)

    def test_dumps_too_deep(self):
        """Test that text serialization reports the depth it could not handle."""
        depth = 100000

        with pytest.raises(JsonDepthError, match=f"depth {depth} is too deep") as exc_info:
            json_codec.dumps([nested(depth)])

        assert exc_info.value.depth == depth
        assert isinstance(exc_info.value, JsonCodecError)

    def test_loads_too_deep(self):
        depth = 100000
        text = "[" * depth + "]" * depth

        with pytest.raises(JsonDepthError, match="nested too deeply"):
            json_codec.loads(text)

    def test_moderate_depth_text_round_trip(self):
        depth = 50
        text = json_codec.dumps([nested(depth)])

        (root,) = json_codec.loads(text)

        assert chain_length(root) == depth
