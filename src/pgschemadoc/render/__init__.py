"""
Output renderers.

Each renderer is built from an options value and turns a finished Schema
into text. Renderers never modify the Schema and keep its ordering.
"""

from pgschemadoc.render.puml import PumlOptions, PumlRenderer
from pgschemadoc.render.json_output import JsonOptions, JsonRenderer, schema_to_dict
from pgschemadoc.render.markdown import DEFAULT_TEMPLATE, MarkdownOptions, MarkdownRenderer

__all__ = [
    "PumlOptions",
    "PumlRenderer",
    "JsonOptions",
    "JsonRenderer",
    "schema_to_dict",
    "DEFAULT_TEMPLATE",
    "MarkdownOptions",
    "MarkdownRenderer",
]
