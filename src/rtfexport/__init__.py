"""rtfexport - serialize rich-text document trees to RTF.

Usage::

    from rtfexport import Converter

    rtf = Converter().convert_html("<h1>Title</h1><p>Hello <b>world</b></p>")
"""

__version__ = "0.1.0"

from rtfexport.converter import Converter
from rtfexport.encoder import decode_unicode_escapes, encode
from rtfexport.errors import NestingTooDeepError, RtfExportError
from rtfexport.nodes import DocumentNode, NodeType
from rtfexport.renderer import RtfRenderer

__all__ = [
    "Converter",
    "DocumentNode",
    "NestingTooDeepError",
    "NodeType",
    "RtfExportError",
    "RtfRenderer",
    "decode_unicode_escapes",
    "encode",
]
