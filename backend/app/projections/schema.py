"""Schema of the projected relation.

The schema is an ordered, immutable set of ``(name, type)`` pairs loaded once
at startup. :class:`Relation` compiles it into an SQLAlchemy Core table so
that every queryable name maps to a pre-built column reference; request
strings are only ever used as lookup keys into that mapping.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from sqlalchemy import Boolean, Column, Date, DateTime, Float, Integer, MetaData, Table, Text
from sqlalchemy.types import TypeEngine

from app.projections.errors import SchemaError

_TRUE_VALUES = {"true", "t", "1", "yes", "y"}
_FALSE_VALUES = {"false", "f", "0", "no", "n"}


class ColumnType(str, enum.Enum):
    """Semantic type of a schema column."""

    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    DATE = "date"
    DATETIME = "datetime"

    @property
    def sql_type(self) -> TypeEngine:
        """SQLAlchemy type used for the column."""
        return {
            ColumnType.INT: Integer(),
            ColumnType.FLOAT: Float(),
            ColumnType.STRING: Text(),
            ColumnType.BOOL: Boolean(),
            ColumnType.DATE: Date(),
            ColumnType.DATETIME: DateTime(timezone=True),
        }[self]

    def coerce(self, raw: str) -> Any:
        """Convert a raw string (e.g. from a query parameter) to this type.

        Raises:
            ValueError: If the string is not a valid literal for the type.
        """
        if self is ColumnType.INT:
            return int(raw)
        if self is ColumnType.FLOAT:
            return float(raw)
        if self is ColumnType.BOOL:
            lowered = raw.strip().lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
            raise ValueError(f"invalid boolean literal: {raw!r}")
        if self is ColumnType.DATE:
            return date.fromisoformat(raw)
        if self is ColumnType.DATETIME:
            return datetime.fromisoformat(raw)
        return raw


@dataclass(frozen=True)
class FieldSchema:
    """A single named, typed column."""

    name: str
    type: ColumnType = ColumnType.STRING


class Schema:
    """Ordered set of known columns with O(1) lookup by exact name.

    Names are compared case-sensitively; ``"Name"`` and ``"name"`` are
    different columns.
    """

    def __init__(self, fields: Iterable[FieldSchema]) -> None:
        self._fields = tuple(fields)
        if not self._fields:
            raise SchemaError("schema must declare at least one column")
        self._index: dict[str, FieldSchema] = {}
        for f in self._fields:
            if not f.name:
                raise SchemaError("column names must be non-empty")
            if f.name in self._index:
                raise SchemaError(f"duplicate column name: {f.name!r}")
            self._index[f.name] = f

    @classmethod
    def parse(cls, spec: str) -> Schema:
        """Build a schema from ``"id:int,name:string,..."``.

        A column without a type defaults to ``string``.

        Raises:
            SchemaError: On an unknown type or duplicate/empty column name.
        """
        fields = []
        for part in spec.split(","):
            part = part.strip()
            if not part:
                continue
            name, _, type_name = part.partition(":")
            type_name = type_name.strip() or ColumnType.STRING.value
            try:
                column_type = ColumnType(type_name)
            except ValueError:
                raise SchemaError(
                    f"unknown column type {type_name!r} for column {name.strip()!r}"
                ) from None
            fields.append(FieldSchema(name.strip(), column_type))
        return cls(fields)

    @property
    def fields(self) -> tuple[FieldSchema, ...]:
        return self._fields

    @property
    def names(self) -> list[str]:
        return [f.name for f in self._fields]

    def find_field(self, name: str) -> FieldSchema | None:
        return self._index.get(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._index

    def __iter__(self) -> Iterator[FieldSchema]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        cols = ", ".join(f"{f.name}:{f.type.value}" for f in self._fields)
        return f"<Schema({cols})>"


class Relation:
    """A schema bound to one relation name.

    Args:
        name: Relation name, optionally schema-qualified (``"public.users"``).
        schema: Columns of the relation.
        metadata: Metadata to attach the table to; a private one by default.
    """

    def __init__(self, name: str, schema: Schema, metadata: MetaData | None = None):
        if not name:
            raise SchemaError("relation name must be non-empty")
        db_schema, _, table_name = name.rpartition(".")
        self.name = name
        self.schema = schema
        self.table = Table(
            table_name,
            metadata if metadata is not None else MetaData(),
            *(Column(f.name, f.type.sql_type) for f in schema),
            schema=db_schema or None,
        )
        self._columns: dict[str, Column] = {f.name: self.table.c[f.name] for f in schema}

    def column(self, name: str) -> Column | None:
        """Pre-built column reference for a schema name, or None."""
        return self._columns.get(name)

    def __repr__(self) -> str:
        return f"<Relation(name={self.name!r}, schema={self.schema!r})>"
