"""
Postgres schema introspection.

Connects to a database, runs the catalog queries for one namespace and
assembles the results into a Schema model.
"""

from pgschemadoc.introspect.models import (
    ColumnDefinition,
    ColumnIdentity,
    ConstraintDefinition,
    Enum,
    ForeignKeyDefinition,
    Schema,
    Table,
    TableStub,
)
from pgschemadoc.introspect.connection import connect, open_connection, ping
from pgschemadoc.introspect.assembler import assemble_schema, build_table, validate_schema
from pgschemadoc.introspect.extract import extract_schema

__all__ = [
    "ColumnDefinition",
    "ColumnIdentity",
    "ConstraintDefinition",
    "Enum",
    "ForeignKeyDefinition",
    "Schema",
    "Table",
    "TableStub",
    "connect",
    "open_connection",
    "ping",
    "assemble_schema",
    "build_table",
    "validate_schema",
    "extract_schema",
]
