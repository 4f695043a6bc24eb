"""Projection API routes.

Callers choose which columns of the configured relation to receive:

    GET /projection/rows?fields=name,email
    GET /projection/rows?fields=name&fields=email&filter=age:30
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from app.projections.errors import DataSourceError, InvalidRequest, UnknownField
from app.projections.query import Row
from app.schemas.projection import ErrorDetail, SchemaField, SchemaResponse
from app.services.field_projector import FieldProjector

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projection", tags=["projection"])


def get_projector(request: Request) -> FieldProjector:
    """Projector built during application startup."""
    return request.app.state.projector


def parse_field_list(values: list[str]) -> list[str]:
    """Flatten comma-separated and repeated ``fields`` parameters.

    Entries are kept verbatim and in order; blank parameter values are
    skipped.
    """
    fields: list[str] = []
    for value in values:
        if not value.strip():
            continue
        fields.extend(value.split(","))
    return fields


def parse_filters(values: list[str]) -> dict[str, str]:
    """Parse repeated ``column:value`` filter parameters.

    Raises:
        InvalidRequest: If a parameter has no ``:`` separator.
    """
    filters: dict[str, str] = {}
    for value in values:
        name, sep, raw = value.partition(":")
        if not sep:
            raise InvalidRequest(f"Filter must be of the form column:value, got {value!r}")
        filters[name] = raw
    return filters


def _bad_request(detail: ErrorDetail) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail.model_dump(exclude_none=True),
    )


@router.get("/rows")
async def get_rows(
    projector: FieldProjector = Depends(get_projector),
    fields: list[str] = Query(
        [], description="Field names, comma-separated and/or repeated"
    ),
    filters: list[str] = Query(
        [], alias="filter", description="Equality filters as column:value"
    ),
) -> list[Row]:
    """Return the requested fields of every row, in requested field order.

    Returns:
        JSON array with one object per row.

    Raises:
        HTTPException: 400 for an empty/malformed request or unknown field,
            502 if the data source fails.
    """
    try:
        return await projector.project(
            parse_field_list(fields), parse_filters(filters)
        )
    except UnknownField as e:
        logger.warning("Rejected projection request, unknown fields: %s", e.fields)
        raise _bad_request(
            ErrorDetail(error="unknown_field", message=str(e), fields=e.fields)
        ) from e
    except InvalidRequest as e:
        logger.warning("Rejected projection request: %s", e)
        raise _bad_request(ErrorDetail(error="invalid_request", message=str(e))) from e
    except DataSourceError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=ErrorDetail(
                error="data_source_error",
                message="Data source unavailable",
            ).model_dump(exclude_none=True),
        ) from e


@router.get("/schema", response_model=SchemaResponse)
async def get_schema(
    projector: FieldProjector = Depends(get_projector),
) -> SchemaResponse:
    """List the fields that may be requested."""
    return SchemaResponse(
        relation=projector.relation.name,
        fields=[SchemaField(name=name, type=type_) for name, type_ in projector.describe()],
    )
