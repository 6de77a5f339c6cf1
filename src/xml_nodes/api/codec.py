"""String and file level conversions between XML, node trees and JSON.

These functions wire the reference tokenizer and writer to the decoder,
encoder and JSON codec:

    XML text --MarkupTokenizer--> tokens --decode--> Nodes
    Nodes --encode--> tokens --MarkupWriter--> XML text
    Nodes <--json_codec--> JSON text
"""

from pathlib import Path
from typing import Iterable, Optional, Union

from xml_nodes.shared.config import CodecConfig
from xml_nodes.shared.logging import get_logger
from xml_nodes.tokenization import MarkupTokenizer, MarkupWriter
from xml_nodes.tokenization.tokenizer import InputType
from xml_nodes.tree import json_codec
from xml_nodes.tree.decoder import NodeDecoder
from xml_nodes.tree.encoder import NodeEncoder
from xml_nodes.tree.nodes import Node, Nodes

EncodableType = Union[Node, Iterable[Node]]


def parse_string(source: InputType, config: Optional[CodecConfig] = None) -> Nodes:
    """Decode XML text into a node sequence.

    Args:
        source: XML as string, bytes or file-like object
        config: Optional codec configuration

    Returns:
        The whole document, including instructions and declarations

    Examples:
        >>> parse_string('<?xml version="1.0"?><one/>')
        (Pi(target='xml', content='version="1.0"'), Elem(name=Name(space='', local='one'), attrs=(), nodes=()))
    """
    config = config or CodecConfig()
    logger = get_logger(__name__, config.correlation_id, "parse_string")
    logger.debug(
        "Starting markup decode", extra={"input_type": type(source).__name__}
    )

    tokenizer = MarkupTokenizer(source, config.tokenizer, config.correlation_id)
    return NodeDecoder(config.decoder, config.correlation_id).decode(tokenizer)


def parse_file(
    path: Union[str, Path], config: Optional[CodecConfig] = None
) -> Nodes:
    """Decode an XML file into a node sequence. The file is read as UTF-8."""
    return parse_string(Path(path).read_bytes(), config)


def to_markup(value: EncodableType, config: Optional[CodecConfig] = None) -> str:
    """Encode a node or node sequence as XML text.

    The result is equivalent to the decoded document but not necessarily
    identical: namespace prefixes are not preserved.
    """
    config = config or CodecConfig()
    writer = MarkupWriter(correlation_id=config.correlation_id)
    NodeEncoder(config.correlation_id).encode(value, writer)
    writer.close()
    return writer.getvalue()


def to_json(value: EncodableType, config: Optional[CodecConfig] = None) -> str:
    """Encode a node or node sequence as tagged JSON text."""
    config = config or CodecConfig()
    return json_codec.dumps(value, config.json)


def from_json(text: Union[str, bytes]) -> Nodes:
    """Decode tagged JSON text into a node sequence."""
    return json_codec.loads(text)


def markup_to_json(source: InputType, config: Optional[CodecConfig] = None) -> str:
    """Convert XML text straight into tagged JSON text."""
    return to_json(parse_string(source, config), config)


def json_to_markup(
    text: Union[str, bytes], config: Optional[CodecConfig] = None
) -> str:
    """Convert tagged JSON text straight into XML text."""
    return to_markup(from_json(text), config)
