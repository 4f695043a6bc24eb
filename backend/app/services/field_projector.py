"""Field projector service.

Runs the validate → build → execute → shape cycle for one request. The
projector holds only the immutable relation and a session factory, so a
single instance is shared by all concurrent requests; each call opens and
closes its own session.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config import settings
from app.projections.errors import DataSourceError
from app.projections.query import (
    Row,
    bind_filters,
    build_projection_query,
    shape_rows,
    validate_fields,
)
from app.projections.schema import Relation, Schema

logger = logging.getLogger(__name__)


class FieldProjector:
    """Project caller-selected columns of one relation.

    Args:
        relation: The relation and its schema.
        session_factory: Factory producing a fresh AsyncSession per call.
    """

    def __init__(
        self,
        relation: Relation,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.relation = relation
        self._session_factory = session_factory

    async def project(
        self,
        fields: Sequence[str] | None,
        filters: Mapping[str, Any] | None = None,
    ) -> list[Row]:
        """Return the requested fields of every matching record.

        Args:
            fields: Requested field names, in the order they should appear in
                each row. Duplicates collapse onto the first occurrence.
            filters: Optional ``{column: value}`` equality filters.

        Returns:
            One dict per record, keys in requested order, records in the
            data source's retrieval order.

        Raises:
            InvalidRequest: Empty or malformed field list, or a filter value
                that does not match its column type.
            UnknownField: A field or filter name outside the schema. No query
                is executed in this case.
            DataSourceError: The query could not be executed.
        """
        columns = validate_fields(self.relation, fields)
        where = bind_filters(self.relation, filters)
        query = build_projection_query(self.relation, columns, where)

        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                records = result.all()
        except (SQLAlchemyError, OSError) as e:
            logger.exception("Projection query on %s failed", self.relation.name)
            raise DataSourceError("Data source query failed") from e

        logger.debug(
            "Projected %d row(s) of %s for fields %s",
            len(records),
            self.relation.name,
            columns,
        )
        return shape_rows(columns, records)

    def describe(self) -> list[tuple[str, str]]:
        """Schema columns as ``(name, type)`` pairs, in declaration order."""
        return [(f.name, f.type.value) for f in self.relation.schema]


def build_projector(session_factory: async_sessionmaker[AsyncSession]) -> FieldProjector:
    """Create the projector for the configured relation and schema."""
    relation = Relation(
        settings.projection_relation,
        Schema.parse(settings.projection_schema),
    )
    logger.info("Field projector ready for %r", relation)
    return FieldProjector(relation, session_factory)
