"""Tests for parameter decoding and placeholder binding."""

import json

import pytest

from dbgate.database.parameters import ParamStyle, bind_parameters, parse_parameters


class TestParseParameters:
    """Tests for parse_parameters()."""

    @pytest.mark.parametrize("value", [None, "", "   ", "{}"])
    def test_empty_inputs(self, value) -> None:
        assert parse_parameters(value) == {}

    def test_json_object(self) -> None:
        assert parse_parameters('{"id": 42, "status": "active", "score": 1.5, "deleted": null}') == {
            "id": 42,
            "status": "active",
            "score": 1.5,
            "deleted": None,
        }

    def test_mapping_is_copied(self) -> None:
        original = {"id": 1}

        parsed = parse_parameters(original)

        assert parsed == original
        assert parsed is not original

    def test_malformed_json_raises(self) -> None:
        with pytest.raises(json.JSONDecodeError):
            parse_parameters("{id: 1")

    @pytest.mark.parametrize("value", ["[1, 2]", "42", '"text"', "null"])
    def test_non_object_raises(self, value: str) -> None:
        with pytest.raises(ValueError, match="Parameters must be a JSON object"):
            parse_parameters(value)


class TestBindParameters:
    """Tests for bind_parameters()."""

    def test_no_parameters_leaves_statement_alone(self) -> None:
        sql = "SELECT * FROM t WHERE note LIKE '50%' AND id = @id"

        for style in ParamStyle:
            assert bind_parameters(sql, None, style) == (sql, None)
            assert bind_parameters(sql, {}, style) == (sql, None)

    def test_named_style(self) -> None:
        statement, args = bind_parameters(
            "SELECT * FROM t WHERE id = @id AND status = @status", {"id": 1, "status": "a"}, ParamStyle.NAMED
        )

        assert statement == "SELECT * FROM t WHERE id = :id AND status = :status"
        assert args == {"id": 1, "status": "a"}

    def test_pyformat_style_escapes_percent(self) -> None:
        statement, args = bind_parameters(
            "SELECT * FROM t WHERE name LIKE 'A%' AND id = @id", {"id": 7}, ParamStyle.PYFORMAT
        )

        assert statement == "SELECT * FROM t WHERE name LIKE 'A%%' AND id = %(id)s"
        assert args == {"id": 7}

    def test_qmark_style_orders_by_occurrence(self) -> None:
        statement, args = bind_parameters(
            "SELECT * FROM t WHERE a = @b OR b = @a OR c = @b", {"a": 1, "b": 2}, ParamStyle.QMARK
        )

        assert statement == "SELECT * FROM t WHERE a = ? OR b = ? OR c = ?"
        assert args == (2, 1, 2)

    def test_names_match_case_insensitively(self) -> None:
        statement, args = bind_parameters("SELECT * FROM t WHERE id = @ID", {"id": 3}, ParamStyle.NAMED)

        assert statement == "SELECT * FROM t WHERE id = :id"
        assert args == {"id": 3}

    def test_exact_name_wins_over_folded_match(self) -> None:
        statement, args = bind_parameters("SELECT @Id, @id", {"id": 1, "Id": 2}, ParamStyle.QMARK)

        assert statement == "SELECT ?, ?"
        assert args == (2, 1)

    def test_literals_and_identifiers_are_untouched(self) -> None:
        statement, args = bind_parameters(
            "SELECT '@id', \"@id\", 'it''s @id' FROM t WHERE id = @id", {"id": 5}, ParamStyle.QMARK
        )

        assert statement == "SELECT '@id', \"@id\", 'it''s @id' FROM t WHERE id = ?"
        assert args == (5,)

    def test_server_variables_and_unknown_names_are_untouched(self) -> None:
        statement, _ = bind_parameters(
            "SELECT @@VERSION, @local, @id", {"id": 1, "VERSION": "x"}, ParamStyle.NAMED
        )

        assert statement == "SELECT @@VERSION, @local, :id"

    def test_unused_parameters_are_passed_through(self) -> None:
        statement, args = bind_parameters("SELECT 1", {"unused": 1}, ParamStyle.PYFORMAT)

        assert statement == "SELECT 1"
        assert args == {"unused": 1}

    def test_qmark_with_no_placeholders_binds_nothing(self) -> None:
        assert bind_parameters("SELECT 1", {"unused": 1}, ParamStyle.QMARK) == ("SELECT 1", ())

    @pytest.mark.parametrize("name", ["@id", ":id", "?id"])
    def test_supplied_names_may_carry_a_prefix(self, name: str) -> None:
        assert bind_parameters("SELECT * FROM t WHERE id = @id", {name: 4}, ParamStyle.NAMED) == (
            "SELECT * FROM t WHERE id = :id",
            {"id": 4},
        )
        assert bind_parameters("SELECT * FROM t WHERE id = @id", {name: 4}, ParamStyle.QMARK) == (
            "SELECT * FROM t WHERE id = ?",
            (4,),
        )

    def test_only_one_prefix_is_dropped(self) -> None:
        statement, args = bind_parameters("SELECT @id", {"@@id": 1}, ParamStyle.PYFORMAT)

        assert statement == "SELECT @id"
        assert args == {"@id": 1}
