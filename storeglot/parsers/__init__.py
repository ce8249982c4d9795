"""
Format parsers.

Each parser extracts translatable fragments from one document format and
writes translations back into it.
"""

from storeglot.parsers.base import ContentParser, StructuredParser
from storeglot.parsers.editorjs import EditorJsParser
from storeglot.parsers.generic_json import JsonParser
from storeglot.parsers.grapejs import GrapeJsParser
from storeglot.parsers.html import HtmlParser
from storeglot.parsers.markdown import MarkdownParser
from storeglot.parsers.plain import PlainTextParser

__all__ = [
    "ContentParser",
    "StructuredParser",
    "EditorJsParser",
    "GrapeJsParser",
    "HtmlParser",
    "JsonParser",
    "MarkdownParser",
    "PlainTextParser",
]
