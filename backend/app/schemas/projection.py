"""Pydantic schemas for the projection API."""

from typing import Literal

from pydantic import BaseModel, Field


class SchemaField(BaseModel):
    """One queryable column."""

    name: str
    type: str = Field(..., description="Semantic column type, e.g. 'int' or 'string'")


class SchemaResponse(BaseModel):
    """Fields a caller may request from the projected relation."""

    relation: str
    fields: list[SchemaField]


class ErrorDetail(BaseModel):
    """Error body carried in ``detail`` of a failed projection request."""

    error: Literal["invalid_request", "unknown_field", "data_source_error"]
    message: str
    fields: list[str] | None = Field(
        default=None,
        description="Unrecognized field names (unknown_field only)",
    )
