"""JSON output.

Field names follow the established output of the tool so existing consumers
keep working: PascalCase at the root, on foreign keys and on enums, camelCase
on tables and columns.
"""
from __future__ import annotations
import json
from dataclasses import dataclass
from typing import Any

from pgschemadoc.introspect.models import ColumnDefinition, Enum, ForeignKeyDefinition, Schema, Table


@dataclass(frozen=True)
class JsonOptions:
    indent: int | None = 2


def column_to_dict(column: ColumnDefinition) -> dict[str, Any]:
    return {
        "name": column.name,
        "type": column.data_type,
        "custom": column.custom_type,
        "description": column.description,
        "nullable": column.is_nullable,
    }


def foreign_key_to_dict(fk: ForeignKeyDefinition) -> dict[str, Any]:
    return {
        "Column": fk.column,
        "Name": fk.name,
        "RefTable": fk.ref_table,
        "RefColumn": fk.ref_column,
    }


def table_to_dict(table: Table) -> dict[str, Any]:
    return {
        "name": table.name,
        "description": table.description,
        "keyColumns": [column_to_dict(c) for c in table.key_columns],
        "columns": [column_to_dict(c) for c in table.columns],
        "foreignKeys": [foreign_key_to_dict(fk) for fk in table.foreign_keys],
    }


def enum_to_dict(enum: Enum) -> dict[str, Any]:
    return {
        "Name": enum.name,
        "Description": enum.description,
        "Values": list(enum.values),
    }


def schema_to_dict(schema: Schema) -> dict[str, Any]:
    return {
        "Tables": [table_to_dict(t) for t in schema.tables],
        "Enums": [enum_to_dict(e) for e in schema.enums],
    }


class JsonRenderer:
    """Render a Schema as a JSON document."""

    def __init__(self, options: JsonOptions | None = None):
        self.options = options or JsonOptions()

    def render(self, schema: Schema) -> str:
        return json.dumps(schema_to_dict(schema), indent=self.options.indent, ensure_ascii=False)
