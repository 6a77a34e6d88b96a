"""Schema assembly.

Folds the per-table query results into the Schema model:
- classifies constraints into primary key columns and foreign keys
- partitions columns into key / non-key, keeping ordinal order
- checks that every constraint belongs to the table being processed

Tables are processed one after another on a single connection. Any error
aborts the whole run; a partial Schema is never returned.
"""
from __future__ import annotations
import logging
from collections import Counter
from typing import Sequence

import asyncpg

from pgschemadoc.errors import (
    ConstraintValidationError,
    SchemaInconsistencyError,
    UnknownConstraintError,
)
from pgschemadoc.introspect import queries
from pgschemadoc.introspect.models import (
    FOREIGN_KEY,
    PRIMARY_KEY,
    ColumnDefinition,
    ConstraintDefinition,
    ForeignKeyDefinition,
    Schema,
    Table,
    TableStub,
)

logger = logging.getLogger(__name__)


def build_table(
    stub: TableStub,
    columns: Sequence[ColumnDefinition],
    constraints: Sequence[ConstraintDefinition]
) -> Table:
    """Build a Table from its stub, columns and constraints.

    Pure function: no I/O, so it can be exercised without a database.

    Args:
        stub: Table name and description
        columns: Columns in ordinal order
        constraints: PRIMARY KEY / FOREIGN KEY constraints of the table

    Returns:
        Table with key columns, other columns and foreign keys attached

    Raises:
        SchemaInconsistencyError: If a constraint column belongs to another table
        ConstraintValidationError: If a foreign key is not single-column
        UnknownConstraintError: If a constraint kind is not supported
    """
    key_names: set[str] = set()
    foreign_keys: list[ForeignKeyDefinition] = []

    for constraint in constraints:
        if constraint.constraint_type == PRIMARY_KEY:
            for column in constraint.local_columns:
                if column.table != stub.name:
                    raise SchemaInconsistencyError(
                        f"Table {stub.name} had primary key {constraint.constraint_name} in {column.table}",
                        table=stub.name,
                        constraint_name=constraint.constraint_name,
                    )
                key_names.add(column.column)

        elif constraint.constraint_type == FOREIGN_KEY:
            if len(constraint.local_columns) != 1 or len(constraint.foreign_columns) != 1:
                raise ConstraintValidationError(constraint.constraint_name)

            local = constraint.local_columns[0]
            if local.table != stub.name:
                raise SchemaInconsistencyError(
                    f"Table {stub.name} had foreign key {constraint.constraint_name} in {local.table}",
                    table=stub.name,
                    constraint_name=constraint.constraint_name,
                )
            foreign = constraint.foreign_columns[0]
            foreign_keys.append(ForeignKeyDefinition(
                column=local.column,
                name=constraint.constraint_name,
                ref_table=foreign.table,
                ref_column=foreign.column,
            ))

        else:
            raise UnknownConstraintError(constraint.constraint_type, constraint.constraint_name)

    key_columns = tuple(c for c in columns if c.name in key_names)
    other_columns = tuple(c for c in columns if c.name not in key_names)

    return Table(
        name=stub.name,
        description=stub.description,
        key_columns=key_columns,
        columns=other_columns,
        foreign_keys=tuple(foreign_keys),
    )


def validate_schema(schema: Schema) -> None:
    """Check that table names and enum names are unique."""
    for kind, names in (
        ("table", [t.name for t in schema.tables]),
        ("enum", [e.name for e in schema.enums]),
    ):
        duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
        if duplicates:
            raise SchemaInconsistencyError(f"Duplicate {kind} names: {', '.join(duplicates)}")


async def assemble_schema(
    conn: asyncpg.Connection,
    namespace: str,
    exclude: Sequence[str] = (),
    timeout: float | None = None
) -> Schema:
    """Extract and assemble the full schema of one namespace.

    Args:
        conn: Open database connection
        namespace: Schema name to document
        exclude: Table names to leave out (exact match)
        timeout: Per-query timeout in seconds

    Returns:
        Assembled, immutable Schema
    """
    stubs = await queries.list_tables(conn, namespace, exclude, timeout=timeout)
    logger.info(f"Found {len(stubs)} tables in {namespace}")

    tables = []
    for stub in stubs:
        columns = await queries.list_columns(conn, namespace, stub.name, timeout=timeout)
        constraints = await queries.list_constraints(conn, namespace, stub.name, timeout=timeout)
        table = build_table(stub, columns, constraints)
        logger.debug(
            f"Table {table.name}: {len(table.key_columns)} key columns, "
            f"{len(table.columns)} columns, {len(table.foreign_keys)} foreign keys"
        )
        tables.append(table)

    enums = await queries.list_enums(conn, namespace, timeout=timeout)
    logger.info(f"Found {len(enums)} enums in {namespace}")

    schema = Schema(tables=tuple(tables), enums=tuple(enums))
    validate_schema(schema)
    return schema
