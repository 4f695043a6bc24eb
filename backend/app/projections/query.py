"""Validation, query construction and result shaping for field projection."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.sql.elements import ColumnElement

from app.projections.errors import InvalidRequest, UnknownField
from app.projections.schema import Relation

Row = dict[str, Any]


def validate_fields(relation: Relation, fields: Sequence[str] | None) -> list[str]:
    """Check a field request against the relation's schema.

    Args:
        relation: The projected relation.
        fields: Requested field names, in caller order.

    Returns:
        The requested names with duplicates removed, each kept at the
        position of its first occurrence.

    Raises:
        InvalidRequest: If ``fields`` is None, empty, a bare string, or
            contains a non-string entry.
        UnknownField: If any name is not in the schema. All unknown names
            are reported, not only the first.
    """
    if fields is None:
        raise InvalidRequest("A field list is required")
    if isinstance(fields, (str, bytes)):
        raise InvalidRequest("Fields must be a list of names, not a single string")
    requested = list(fields)
    if not requested:
        raise InvalidRequest("At least one field must be requested")
    if any(not isinstance(name, str) for name in requested):
        raise InvalidRequest("Field names must be strings")

    unknown = [name for name in requested if name not in relation.schema]
    if unknown:
        raise UnknownField(list(dict.fromkeys(unknown)))

    return list(dict.fromkeys(requested))


def bind_filters(
    relation: Relation, filters: Mapping[str, Any] | None
) -> list[ColumnElement[bool]]:
    """Turn ``{column: value}`` equality filters into bound WHERE clauses.

    String values are coerced to the column's type first. Values are always
    sent as bound parameters.

    Raises:
        UnknownField: If a filter names a column outside the schema.
        InvalidRequest: If a value cannot be coerced to the column type.
    """
    if not filters:
        return []

    unknown = [name for name in filters if name not in relation.schema]
    if unknown:
        raise UnknownField(unknown)

    clauses = []
    for name, raw in filters.items():
        field = relation.schema.find_field(name)
        value = raw
        if isinstance(raw, str):
            try:
                value = field.type.coerce(raw)
            except ValueError as e:
                raise InvalidRequest(
                    f"Invalid {field.type.value} value for {name!r}: {raw!r}"
                ) from e
        clauses.append(relation.column(name) == value)
    return clauses


def build_projection_query(
    relation: Relation,
    fields: Sequence[str],
    where: Iterable[ColumnElement[bool]] = (),
) -> Select:
    """Build ``SELECT <fields> FROM <relation> [WHERE ...]``.

    ``fields`` must already be validated; only column objects from the
    relation's pre-built mapping reach the select list. No ORDER BY is
    added, rows come back in the data source's natural order.
    """
    query = select(*(relation.column(name) for name in fields))
    clauses = list(where)
    if clauses:
        query = query.where(*clauses)
    return query


def shape_rows(fields: Sequence[str], records: Iterable[Sequence[Any]]) -> list[Row]:
    """Map each record positionally onto the requested field names."""
    return [dict(zip(fields, record)) for record in records]
