"""In-memory schema model produced by extraction.

Everything is frozen and sequences are tuples: once a Schema is assembled
nothing downstream can change it.
"""
from __future__ import annotations
from dataclasses import dataclass, field

PRIMARY_KEY = "PRIMARY KEY"
FOREIGN_KEY = "FOREIGN KEY"


@dataclass(frozen=True)
class ColumnDefinition:
    """A single column, with its type already formatted for display."""
    name: str
    data_type: str
    custom_type: bool = False
    description: str = ""
    is_nullable: bool = True


@dataclass(frozen=True)
class ColumnIdentity:
    """A (table, column) pair as reported inside a constraint."""
    table: str
    column: str


@dataclass(frozen=True)
class ConstraintDefinition:
    """A primary or foreign key constraint before classification."""
    constraint_name: str
    constraint_type: str
    local_columns: tuple[ColumnIdentity, ...] = ()
    foreign_columns: tuple[ColumnIdentity, ...] = ()


@dataclass(frozen=True)
class ForeignKeyDefinition:
    column: str
    name: str
    ref_table: str
    ref_column: str


@dataclass(frozen=True)
class TableStub:
    """A table as returned by the table list, before its columns are known."""
    name: str
    description: str = ""


@dataclass(frozen=True)
class Table:
    name: str
    description: str = ""
    key_columns: tuple[ColumnDefinition, ...] = ()
    columns: tuple[ColumnDefinition, ...] = ()
    foreign_keys: tuple[ForeignKeyDefinition, ...] = ()

    @property
    def all_columns(self) -> tuple[ColumnDefinition, ...]:
        """Key columns followed by the remaining columns."""
        return self.key_columns + self.columns


@dataclass(frozen=True)
class Enum:
    """A user-defined enum type; values keep the declared sort order."""
    name: str
    description: str = ""
    values: tuple[str, ...] = ()


@dataclass(frozen=True)
class Schema:
    """Complete snapshot of one namespace."""
    tables: tuple[Table, ...] = field(default_factory=tuple)
    enums: tuple[Enum, ...] = field(default_factory=tuple)

    def table(self, name: str) -> Table | None:
        """Look up a table by name."""
        return next((t for t in self.tables if t.name == name), None)

    def enum(self, name: str) -> Enum | None:
        """Look up an enum by name."""
        return next((e for e in self.enums if e.name == name), None)
