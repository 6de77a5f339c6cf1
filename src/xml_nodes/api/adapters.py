"""Integration adapter for lxml.

Turns an already parsed ``lxml.etree`` document into the token vocabulary so
it can be decoded like any other token source:

    >>> from lxml import etree
    >>> decode_lxml(etree.fromstring("<one>two</one>"))
    (Elem(name=Name(space='', local='one'), attrs=(), nodes=(Text(content='two'),)),)

lxml keeps less than the markup itself: the XML declaration, whitespace
between top-level nodes and the original position of namespace declarations
are gone by the time a tree exists. New namespace bindings are therefore
emitted as the leading attributes of the element that introduces them.
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple

from xml_nodes.shared.config import DecoderConfig
from xml_nodes.shared.errors import TokenizationError
from xml_nodes.shared.logging import get_logger
from xml_nodes.tokenization.tokenizer import XMLNS_PREFIX
from xml_nodes.tokenization.tokens import Token
from xml_nodes.tree.decoder import NodeDecoder
from xml_nodes.tree.nodes import Attr, Name, Nodes


def _split_clark(key: str) -> Name:
    """Split an lxml ``{uri}local`` key into a Name."""
    if key.startswith("{"):
        space, _, local = key[1:].partition("}")
        return Name(space, local)
    return Name("", key)


def _namespace_attrs(
    nsmap: Dict[Optional[str], str], inherited: Dict[Optional[str], str]
) -> List[Attr]:
    attrs = []
    ordered = sorted(nsmap.items(), key=lambda item: (item[0] is not None, item[0] or ""))
    for prefix, uri in ordered:
        if prefix in inherited and inherited[prefix] == uri:
            continue
        if prefix is None:
            attrs.append(Attr(Name("", XMLNS_PREFIX), uri))
        else:
            attrs.append(Attr(Name(XMLNS_PREFIX, prefix), uri))
    return attrs


def _start_token(element: Any, is_root: bool) -> Token:
    parent = element.getparent()
    inherited = {} if is_root or parent is None else dict(parent.nsmap)

    attrs = _namespace_attrs(dict(element.nsmap), inherited)
    attrs.extend(Attr(_split_clark(key), value) for key, value in element.attrib.items())
    return Token.start_element(Name(*_qname_parts(element)), attrs)


def _subtree_tokens(root: Any) -> Iterator[Token]:
    from lxml import etree

    stack: List[Tuple[Any, bool]] = [(root, False)]
    while stack:
        node, closing = stack.pop()

        if closing:
            yield Token.end_element(Name(*_qname_parts(node)))
        elif node.tag is etree.Comment:
            yield Token.comment(node.text or "")
        elif node.tag is etree.ProcessingInstruction:
            yield Token.processing_instruction(node.target, node.text or "")
        elif isinstance(node.tag, str):
            yield _start_token(node, node is root)
            if node.text:
                yield Token.char_data(node.text)
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node))
            continue
        else:
            raise TokenizationError(f"unsupported lxml node {node!r}")

        if node is not root and node.tail:
            yield Token.char_data(node.tail)


def _qname_parts(element: Any) -> Tuple[str, str]:
    from lxml import etree

    qname = etree.QName(element)
    return qname.namespace or "", qname.localname


def iter_lxml_tokens(obj: Any) -> Iterator[Token]:
    """Yield tokens for an lxml element or element tree.

    For an element tree the doctype and the comments and instructions around
    the root element are included; for an element only its subtree is, with
    every namespace binding it relies on declared on the element itself.
    """
    from lxml import etree

    if isinstance(obj, etree._ElementTree):
        root = obj.getroot()
        doctype = obj.docinfo.doctype
        if doctype:
            yield Token.directive(doctype[len("<!"):-len(">")])
        for sibling in reversed(list(root.itersiblings(preceding=True))):
            yield from _subtree_tokens(sibling)
        yield from _subtree_tokens(root)
        for sibling in root.itersiblings():
            yield from _subtree_tokens(sibling)
    else:
        yield from _subtree_tokens(obj)


def decode_lxml(
    obj: Any,
    config: Optional[DecoderConfig] = None,
    correlation_id: Optional[str] = None,
) -> Nodes:
    """Decode an lxml element or element tree into a node sequence."""
    logger = get_logger(__name__, correlation_id, "lxml_adapter")
    logger.debug("Decoding lxml document", extra={"input_type": type(obj).__name__})
    return NodeDecoder(config, correlation_id).decode(iter_lxml_tokens(obj))
