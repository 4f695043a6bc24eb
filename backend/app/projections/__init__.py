"""Field projection over a fixed relation.

A caller names the columns it wants; names are validated against a fixed
schema and only pre-built column references are used to build the query.
"""

from app.projections.errors import (
    DataSourceError,
    InvalidRequest,
    ProjectionError,
    SchemaError,
    UnknownField,
)
from app.projections.schema import ColumnType, FieldSchema, Relation, Schema

__all__ = [
    "ColumnType",
    "DataSourceError",
    "FieldSchema",
    "InvalidRequest",
    "ProjectionError",
    "Relation",
    "Schema",
    "SchemaError",
    "UnknownField",
]
