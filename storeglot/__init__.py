"""
Storeglot - structure-preserving translation for online store content.

Extracts translatable text from HTML, Markdown, Editor.js, GrapeJS and JSON
documents, translates it through a pluggable backend with a translation
memory, and rebuilds the document with its structure intact.
"""

__version__ = "0.1.0"
