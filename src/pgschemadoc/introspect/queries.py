"""Catalog queries for schema extraction.

Four read-only queries against information_schema / pg_catalog:
- table list (with table comments)
- columns of one table, in ordinal order
- primary and foreign key constraints of one table
- enum types with their labels

No interpretation happens here beyond shaping rows into model objects;
classification of keys lives in the assembler.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Any, Sequence

import asyncpg
from pydantic import BaseModel, ValidationError, field_validator

from pgschemadoc.errors import DecodeError, QueryError
from pgschemadoc.introspect.models import (
    ColumnDefinition,
    ColumnIdentity,
    ConstraintDefinition,
    Enum,
    TableStub,
)

logger = logging.getLogger(__name__)

ENUM_LABEL_SEPARATOR = "|"

_QUERY_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


# ============================================================================
# Constraint payload shape
# ============================================================================

class ColumnIdentityPayload(BaseModel):
    table: str
    column: str


class ConstraintPayload(BaseModel):
    """One row of the constraint query, as produced by row_to_json."""
    constraint_name: str
    constraint_type: str
    local_columns: list[ColumnIdentityPayload] = []
    foreign_columns: list[ColumnIdentityPayload] = []

    @field_validator("local_columns", "foreign_columns", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        """LEFT JOINs yield JSON null when a constraint has no such columns."""
        return [] if v is None else v

    def to_definition(self) -> ConstraintDefinition:
        return ConstraintDefinition(
            constraint_name=self.constraint_name,
            constraint_type=self.constraint_type,
            local_columns=tuple(ColumnIdentity(c.table, c.column) for c in self.local_columns),
            foreign_columns=tuple(ColumnIdentity(c.table, c.column) for c in self.foreign_columns),
        )


def decode_constraint(raw: Any) -> ConstraintDefinition:
    """Decode one aggregated constraint payload.

    Args:
        raw: JSON text (asyncpg returns json columns as str) or an already
            decoded mapping

    Returns:
        ConstraintDefinition

    Raises:
        DecodeError: If the payload is not JSON or has the wrong shape
    """
    try:
        if isinstance(raw, (str, bytes, bytearray)):
            payload = ConstraintPayload.model_validate_json(raw)
        else:
            payload = ConstraintPayload.model_validate(raw)
    except ValidationError as e:
        raise DecodeError(f"Invalid constraint payload: {e}") from e
    return payload.to_definition()


# ============================================================================
# Type formatting
# ============================================================================

def _concat_part(value: Any) -> str:
    # CONCAT() treats NULL as an empty string
    return "" if value is None else str(value)


def format_data_type(
    data_type: str,
    udt_name: str | None = None,
    numeric_precision: int | None = None,
    numeric_scale: int | None = None,
    character_maximum_length: int | None = None,
) -> tuple[str, bool]:
    """Turn information_schema type columns into a display string.

    Returns:
        (display type, whether the type is user-defined)
    """
    if data_type == "USER-DEFINED":
        return _concat_part(udt_name), True
    if data_type == "numeric":
        return f"Number({_concat_part(numeric_precision)},{_concat_part(numeric_scale)})", False
    if data_type == "character":
        return f"Char({_concat_part(character_maximum_length)})", False
    if data_type == "timestamp with time zone":
        return "timestamp", False
    return data_type, False


# ============================================================================
# Queries
# ============================================================================

async def _fetch(
    conn: asyncpg.Connection,
    purpose: str,
    query: str,
    *args: Any,
    timeout: float | None = None
) -> list[asyncpg.Record]:
    try:
        return await conn.fetch(query, *args, timeout=timeout)
    except asyncio.TimeoutError as e:
        if timeout is None:
            raise QueryError(purpose, f"timed out: {e}" if str(e) else "timed out") from e
        raise QueryError(purpose, f"timed out after {timeout}s") from e
    except _QUERY_ERRORS as e:
        raise QueryError(purpose, str(e)) from e


async def list_tables(
    conn: asyncpg.Connection,
    namespace: str,
    exclude: Sequence[str] = (),
    timeout: float | None = None
) -> list[TableStub]:
    """List user tables of a namespace.

    Args:
        conn: Database connection
        namespace: Schema name (e.g. 'public')
        exclude: Table names to leave out, matched exactly
        timeout: Per-query timeout in seconds

    Returns:
        TableStub list ordered by table name
    """
    rows = await _fetch(
        conn,
        "Looking up tables",
        """
        SELECT
            st.relname::text AS name,
            COALESCE(obj_description(st.relid, 'pg_class'), '') AS description
        FROM pg_catalog.pg_statio_user_tables st
        WHERE st.schemaname = $1
        ORDER BY st.relname
        """,
        namespace,
        timeout=timeout
    )

    excluded = set(exclude)
    tables = []
    for row in rows:
        if row["name"] in excluded:
            logger.debug(f"Excluding table {row['name']}")
            continue
        tables.append(TableStub(name=row["name"], description=row["description"]))
    return tables


async def list_columns(
    conn: asyncpg.Connection,
    namespace: str,
    table_name: str,
    timeout: float | None = None
) -> list[ColumnDefinition]:
    """List the columns of one table in ordinal order."""
    rows = await _fetch(
        conn,
        f"Looking up columns of {table_name}",
        """
        SELECT
            c.column_name::text AS column_name,
            c.data_type::text AS data_type,
            c.udt_name::text AS udt_name,
            c.numeric_precision::int AS numeric_precision,
            c.numeric_scale::int AS numeric_scale,
            c.character_maximum_length::int AS character_maximum_length,
            c.is_nullable = 'YES' AS is_nullable,
            COALESCE(pgd.description, '') AS description
        FROM information_schema.columns c
        LEFT JOIN pg_catalog.pg_statio_all_tables st
            ON st.schemaname = c.table_schema AND st.relname = c.table_name
        LEFT JOIN pg_catalog.pg_description pgd
            ON pgd.objoid = st.relid AND pgd.objsubid = c.ordinal_position
        WHERE c.table_schema = $1 AND c.table_name = $2
        ORDER BY c.ordinal_position ASC
        """,
        namespace, table_name,
        timeout=timeout
    )

    columns = []
    for row in rows:
        data_type, custom = format_data_type(
            row["data_type"],
            row["udt_name"],
            row["numeric_precision"],
            row["numeric_scale"],
            row["character_maximum_length"],
        )
        columns.append(ColumnDefinition(
            name=row["column_name"],
            data_type=data_type,
            custom_type=custom,
            description=row["description"],
            is_nullable=bool(row["is_nullable"]),
        ))
    return columns


async def list_constraints(
    conn: asyncpg.Connection,
    namespace: str,
    table_name: str,
    timeout: float | None = None
) -> list[ConstraintDefinition]:
    """List PRIMARY KEY and FOREIGN KEY constraints of one table.

    Constraints are read from pg_constraint by the owning table, so a
    constraint name reused on another table never leaks in. Local and
    foreign columns are aggregated per constraint into a single JSON object
    per row and decoded here.

    Raises:
        QueryError: If the query fails
        DecodeError: If a payload cannot be decoded
    """
    rows = await _fetch(
        conn,
        f"Looking up constraints of {table_name}",
        """
        SELECT row_to_json(root.*) AS payload FROM (
            SELECT
                con.conname::text AS constraint_name,
                CASE con.contype
                    WHEN 'p' THEN 'PRIMARY KEY'
                    ELSE 'FOREIGN KEY'
                END AS constraint_type,
                (
                    SELECT json_agg(json_build_object(
                        'table', rel.relname::text,
                        'column', a.attname::text
                    ) ORDER BY k.ord)
                    FROM unnest(con.conkey) WITH ORDINALITY AS k(attnum, ord)
                    JOIN pg_catalog.pg_attribute a
                        ON a.attrelid = con.conrelid AND a.attnum = k.attnum
                ) AS local_columns,
                (
                    SELECT json_agg(json_build_object(
                        'table', frel.relname::text,
                        'column', a.attname::text
                    ) ORDER BY k.ord)
                    FROM unnest(con.confkey) WITH ORDINALITY AS k(attnum, ord)
                    JOIN pg_catalog.pg_attribute a
                        ON a.attrelid = con.confrelid AND a.attnum = k.attnum
                ) AS foreign_columns
            FROM pg_catalog.pg_constraint con
            JOIN pg_catalog.pg_class rel ON rel.oid = con.conrelid
            JOIN pg_catalog.pg_namespace n ON n.oid = rel.relnamespace
            LEFT JOIN pg_catalog.pg_class frel ON frel.oid = con.confrelid
            WHERE n.nspname = $1
            AND rel.relname = $2
            AND con.contype IN ('p', 'f')
        ) AS root
        ORDER BY root.constraint_type DESC, root.constraint_name
        """,
        namespace, table_name,
        timeout=timeout
    )

    return [decode_constraint(row["payload"]) for row in rows]


async def list_enums(
    conn: asyncpg.Connection,
    namespace: str,
    timeout: float | None = None
) -> list[Enum]:
    """List enum types of a namespace with labels in declared order."""
    rows = await _fetch(
        conn,
        "Looking up enums",
        """
        SELECT
            t.typname::text AS name,
            string_agg(e.enumlabel, '|' ORDER BY e.enumsortorder) AS labels,
            COALESCE(obj_description(t.oid, 'pg_type'), '') AS description
        FROM pg_catalog.pg_type t
        JOIN pg_catalog.pg_namespace n ON n.oid = t.typnamespace
        JOIN pg_catalog.pg_enum e ON e.enumtypid = t.oid
        WHERE n.nspname = $1
        GROUP BY t.oid, t.typname
        ORDER BY t.typname
        """,
        namespace,
        timeout=timeout
    )

    enums = []
    for row in rows:
        labels = row["labels"]
        if labels is None:
            raise DecodeError(f"Enum {row['name']} returned no labels")
        enums.append(Enum(
            name=row["name"],
            description=row["description"],
            values=tuple(labels.split(ENUM_LABEL_SEPARATOR)),
        ))
    return enums
