"""Shared fixtures: the canonical documents and the trees they decode to."""

from pathlib import Path

import pytest

from xml_nodes.tree.nodes import Attr, Comment, Elem, Name, Pi, Text

TEST_DATA = Path(__file__).parent / "test_data"

XML_DECL = Pi("xml", 'version="1.0" encoding="utf-8"')


def attr(local, value, space=""):
    return Attr(Name(space, local), value)


SIMPLE_NODES = (
    XML_DECL,
    Text("\n"),
    Elem(Name("", "one"), (attr("two", "three"),), (
        Text("\n  five\n  "),
        Elem(Name("", "six"), (attr("seven", "eight"),), (
            Text("\n    "),
            Elem(Name("", "nine"), (attr("ten", "eleven"),), (
                Text("\n      twelve\n      "),
                Comment(" thirteen "),
                Text("\n    "),
            )),
            Text("\n    fourteen\n  "),
        )),
        Text("\n  sixteen\n  "),
        Comment(" seventeen "),
        Text("\n"),
    )),
)

NS_ALIASED_NODES = (
    XML_DECL,
    Text("\n"),
    Elem(
        Name("ns_outer", "one"),
        (attr("outer", "ns_outer", space="xmlns"), attr("two", "three")),
        (
            Text("\n  "),
            Elem(Name("ns_outer", "four")),
            Text("\n  "),
            Elem(
                Name("ns_inner", "five"),
                (attr("inner", "ns_inner", space="xmlns"), attr("six", "seven")),
            ),
            Text("\n"),
        ),
    ),
)

NS_INLINED_NODES = (
    XML_DECL,
    Text("\n"),
    Elem(
        Name("ns_outer", "one"),
        (attr("xmlns", "ns_outer"), attr("two", "three")),
        (
            Text("\n  "),
            Elem(Name("ns_outer", "four"), (attr("xmlns", "ns_outer"),)),
            Text("\n  "),
            Elem(
                Name("ns_inner", "five"),
                (attr("xmlns", "ns_inner"), attr("six", "seven")),
            ),
            Text("\n"),
        ),
    ),
)


def read_data(name: str) -> str:
    return (TEST_DATA / name).read_text(encoding="utf-8")


@pytest.fixture
def test_data_dir() -> Path:
    return TEST_DATA


@pytest.fixture
def simple_xml() -> str:
    return read_data("simple.xml")


@pytest.fixture
def simple_json() -> str:
    return read_data("simple.json")


@pytest.fixture
def simple_nodes():
    return SIMPLE_NODES


@pytest.fixture
def ns_aliased_nodes():
    return NS_ALIASED_NODES


@pytest.fixture
def ns_inlined_nodes():
    return NS_INLINED_NODES
