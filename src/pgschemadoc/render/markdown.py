"""Markdown documentation output.

Rendered through a Jinja2 template. The template text is part of the
renderer's options, so callers can swap in their own without touching
module state. Filters available to templates:

- mdescape: paragraph breaks become <br>, other newlines become spaces
- anchor: heading anchor for a snake_case name
- snake_to_title: snake_case to Title Case
- underline: text followed by a setext underline of the same width
- column_type: column type, linked to its enum section when custom
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path

from jinja2 import Environment, StrictUndefined

from pgschemadoc.introspect.models import ColumnDefinition, Schema

DEFAULT_TEMPLATE = """Tables
======
{% for table in schema.tables %}

{{ table.name | snake_to_title | underline("-") }}

{% if table.description %}
{{ table.description | mdescape }}

{% endif %}
| Name | Type | Description |
|------|------|-------------|
{% for column in table.key_columns %}
| {{ column.name }} (KEY) | {{ column | column_type }} | {{ column.description | mdescape }} |
{% endfor %}
{% for column in table.columns %}
| {{ column.name }} | {{ column | column_type }} | {{ column.description | mdescape }} |
{% endfor %}
{% if table.foreign_keys %}

Foreign keys:

{% for fk in table.foreign_keys %}
- {{ fk.name }}: `{{ fk.column }}` references [{{ fk.ref_table }}](#{{ fk.ref_table | anchor }}) `{{ fk.ref_column }}`
{% endfor %}
{% endif %}
{% endfor %}

Enums
=====
{% for enum in schema.enums %}

{{ enum.name | snake_to_title | underline("-") }}

{% if enum.description %}
{{ enum.description | mdescape }}

{% endif %}
{% for value in enum.values %}
- {{ value }}
{% endfor %}
{% endfor %}
"""


def mdescape(value: str) -> str:
    return value.replace("\n\n", "<br>").replace("\n", " ")


def anchor(value: str) -> str:
    return value.replace("_", "-").lower()


def snake_to_title(value: str) -> str:
    words = value.split("_")
    # single-letter words are left alone
    return " ".join(w[0].upper() + w[1:] if len(w) >= 2 else w for w in words)


def underline(value: str, char: str = "-") -> str:
    return f"{value}\n{char * max(len(value), 3)}"


def column_type(column: ColumnDefinition) -> str:
    if column.custom_type:
        return f"[{column.data_type}](#{anchor(column.data_type)})"
    return column.data_type


@dataclass(frozen=True)
class MarkdownOptions:
    template: str = field(default=DEFAULT_TEMPLATE, repr=False)

    @classmethod
    def from_file(cls, path: str | Path) -> MarkdownOptions:
        """Use the template stored at path instead of the default."""
        template_path = Path(path)
        if not template_path.exists():
            raise FileNotFoundError(f"Markdown template not found: {template_path}")
        return cls(template=template_path.read_text(encoding="utf-8"))


class MarkdownRenderer:
    """Render a Schema as Markdown using a Jinja2 template."""

    def __init__(self, options: MarkdownOptions | None = None):
        self.options = options or MarkdownOptions()
        env = Environment(
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        env.filters.update({
            "mdescape": mdescape,
            "anchor": anchor,
            "snake_to_title": snake_to_title,
            "underline": underline,
            "column_type": column_type,
        })
        self._template = env.from_string(self.options.template)

    def render(self, schema: Schema) -> str:
        return self._template.render(schema=schema)
