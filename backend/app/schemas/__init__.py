"""Pydantic schemas."""

from app.schemas.projection import ErrorDetail, SchemaField, SchemaResponse

__all__ = [
    "ErrorDetail",
    "SchemaField",
    "SchemaResponse",
]
