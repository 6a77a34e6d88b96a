"""PlantUML entity-relationship diagram output."""
from __future__ import annotations
from dataclasses import dataclass

from pgschemadoc.introspect.models import ColumnDefinition, Schema, Table


@dataclass(frozen=True)
class PumlOptions:
    include_columns: bool = True
    include_data_types: bool = False


class PumlRenderer:
    """Render a Schema as a PlantUML diagram.

    Each table becomes an entity with its key columns above a `--` separator
    and the remaining columns below it. Non-nullable columns are prefixed
    with `*`. Every foreign key becomes a many-to-one relation line.
    """

    def __init__(self, options: PumlOptions | None = None):
        self.options = options or PumlOptions()

    def render(self, schema: Schema) -> str:
        lines = ["@startuml"]

        if self.options.include_columns:
            for table in schema.tables:
                lines.extend(self._table(table))

        for table in schema.tables:
            for fk in table.foreign_keys:
                lines.append(f"{table.name} }}|--|| {fk.ref_table}")

        lines.append("@enduml")
        return "\n".join(lines) + "\n"

    def _table(self, table: Table) -> list[str]:
        lines = [f"entity {table.name} {{"]
        lines.extend(self._column(c) for c in table.key_columns)
        lines.append("--")
        lines.extend(self._column(c) for c in table.columns)
        lines.append("}")
        return lines

    def _column(self, column: ColumnDefinition) -> str:
        prefix = "" if column.is_nullable else "* "
        if self.options.include_data_types:
            return f"  {prefix}{column.name}: {column.data_type}"
        return f"  {prefix}{column.name}"
