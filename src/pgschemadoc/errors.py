"""Error types raised while extracting a schema.

Every error here is fatal: extraction stops at the first one and the CLI
reports it as a single line.
"""
from __future__ import annotations


class SchemaDocError(Exception):
    """Base class for all extraction failures."""


class DatabaseConnectionError(SchemaDocError):
    """The database could not be opened or did not answer a ping."""


class QueryError(SchemaDocError):
    """A catalog query failed."""

    def __init__(self, purpose: str, message: str):
        self.purpose = purpose
        self.message = message
        super().__init__(f"{purpose}: {message}")


class DecodeError(SchemaDocError):
    """A row or embedded payload did not have the expected shape."""


class SchemaInconsistencyError(SchemaDocError):
    """The extracted catalog contradicts itself.

    Raised when a constraint references a table other than the one being
    processed, or when table or enum names repeat within one schema.
    """

    def __init__(self, message: str, table: str | None = None, constraint_name: str | None = None):
        self.table = table
        self.constraint_name = constraint_name
        super().__init__(message)


class ConstraintValidationError(SchemaDocError):
    """A foreign key does not have exactly one local and one foreign column."""

    def __init__(self, constraint_name: str):
        self.constraint_name = constraint_name
        super().__init__(
            f"foreign keys should have 1 local, 1 foreign column. See {constraint_name}"
        )


class UnknownConstraintError(SchemaDocError):
    """A constraint kind outside PRIMARY KEY / FOREIGN KEY."""

    def __init__(self, constraint_type: str, constraint_name: str = ""):
        self.constraint_type = constraint_type
        self.constraint_name = constraint_name
        detail = f" ({constraint_name})" if constraint_name else ""
        super().__init__(f"Unknown Constraint: {constraint_type}{detail}")
