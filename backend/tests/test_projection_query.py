"""Tests for field validation and projection query construction."""

import pytest
from sqlalchemy.dialects import postgresql

from app.projections.errors import InvalidRequest, UnknownField
from app.projections.query import (
    bind_filters,
    build_projection_query,
    shape_rows,
    validate_fields,
)


def _compile(query):
    return query.compile(dialect=postgresql.dialect())


class TestValidateFields:
    """Tests for validate_fields()."""

    def test_known_fields_pass_in_order(self, relation):
        assert validate_fields(relation, ["email", "name"]) == ["email", "name"]

    def test_none_rejected(self, relation):
        with pytest.raises(InvalidRequest):
            validate_fields(relation, None)

    def test_empty_rejected(self, relation):
        with pytest.raises(InvalidRequest, match="At least one field"):
            validate_fields(relation, [])

    def test_bare_string_rejected(self, relation):
        with pytest.raises(InvalidRequest):
            validate_fields(relation, "name")

    def test_non_string_entry_rejected(self, relation):
        with pytest.raises(InvalidRequest):
            validate_fields(relation, ["name", 3])

    def test_unknown_reports_every_bad_name(self, relation):
        with pytest.raises(UnknownField) as exc_info:
            validate_fields(relation, ["bogus", "name", "other", "bogus"])

        assert exc_info.value.fields == ["bogus", "other"]
        assert "'bogus'" in str(exc_info.value)
        assert "'other'" in str(exc_info.value)

    def test_case_mismatch_is_unknown(self, relation):
        with pytest.raises(UnknownField) as exc_info:
            validate_fields(relation, ["Name"])

        assert exc_info.value.fields == ["Name"]

    @pytest.mark.parametrize(
        "name",
        [
            "name; DROP TABLE users",
            'name" FROM users; --',
            "name\x00",
            "name\n",
            "*",
            "users.name",
        ],
    )
    def test_injection_attempts_are_unknown(self, relation, name):
        with pytest.raises(UnknownField) as exc_info:
            validate_fields(relation, [name])

        assert exc_info.value.fields == [name]

    def test_duplicates_collapse_to_first_occurrence(self, relation):
        assert validate_fields(relation, ["name", "email", "name"]) == ["name", "email"]


class TestBuildProjectionQuery:
    """Tests for build_projection_query()."""

    def test_selects_only_requested_columns(self, relation):
        sql = str(_compile(build_projection_query(relation, ["email", "name"])))

        assert sql.startswith("SELECT users.email, users.name")
        assert "FROM users" in sql
        assert "age" not in sql
        assert "ORDER BY" not in sql

    def test_filters_use_bound_parameters(self, relation):
        where = bind_filters(relation, {"name": "x'; DROP TABLE users; --"})
        compiled = _compile(build_projection_query(relation, ["id"], where))

        assert "DROP TABLE" not in str(compiled)
        assert "x'; DROP TABLE users; --" in compiled.params.values()


class TestBindFilters:
    """Tests for bind_filters()."""

    def test_no_filters(self, relation):
        assert bind_filters(relation, None) == []
        assert bind_filters(relation, {}) == []

    def test_string_values_are_coerced(self, relation):
        (clause,) = bind_filters(relation, {"age": "30"})
        compiled = _compile(clause)

        assert list(compiled.params.values()) == [30]

    def test_uncoercible_value_rejected(self, relation):
        with pytest.raises(InvalidRequest, match="Invalid int value for 'age'"):
            bind_filters(relation, {"age": "old"})

    def test_unknown_filter_column(self, relation):
        with pytest.raises(UnknownField) as exc_info:
            bind_filters(relation, {"password": "secret"})

        assert exc_info.value.fields == ["password"]


def test_shape_rows_maps_positionally():
    rows = shape_rows(["email", "name"], [("alice@example.com", "Alice"), (None, "Bob")])

    assert rows == [
        {"email": "alice@example.com", "name": "Alice"},
        {"email": None, "name": "Bob"},
    ]
    assert list(rows[0]) == ["email", "name"]
