"""Errors raised by the field projection layer.

Callers branch on the exception class: ``InvalidRequest`` and
``UnknownField`` are caller mistakes, ``DataSourceError`` is a failure of
the underlying store.
"""

from collections.abc import Sequence


class ProjectionError(Exception):
    """Base class for projection failures."""


class InvalidRequest(ProjectionError):
    """The field request is missing, empty, or malformed."""


class UnknownField(ProjectionError):
    """One or more requested names are not part of the schema.

    Args:
        fields: Every unrecognized name, in the order it was requested.
    """

    def __init__(self, fields: Sequence[str]):
        self.fields = list(fields)
        names = ", ".join(repr(f) for f in self.fields)
        super().__init__(f"Unknown field(s): {names}")


class DataSourceError(ProjectionError):
    """The data source was unreachable or the query failed."""


class SchemaError(ValueError):
    """The configured schema is invalid."""
