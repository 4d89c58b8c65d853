"""
Tests for the statement builders
"""

import logging

import pytest

from query import (
    DeleteStatement,
    InsertStatement,
    Queries,
    QueryGreater,
    QueryIn,
    QuerySet,
    SelectStatement,
    Statement,
    UpdateStatement,
)


class TestSelectStatement:

    def test_select_with_filters(self):
        queries = Queries().add("id", "abcd1235").add("age", QueryGreater, 18)
        sql, params = SelectStatement().build("person", ["id", "name", "age"], queries)
        assert sql == "SELECT id, name, age FROM person WHERE id = $1 AND age > $2"
        assert params == ["abcd1235", 18]

    def test_select_without_filters(self):
        sql, params = SelectStatement().build("person", ["id"], Queries())
        assert sql == "SELECT id FROM person"
        assert params == []

    def test_select_with_in(self):
        sql, params = SelectStatement().build("person", ["*"], Queries().add("age", 18, 21))
        assert sql == "SELECT * FROM person WHERE age IN ($1, $2)"
        assert params == [18, 21]


class TestInsertStatement:

    def test_insert(self):
        queries = Queries().add("id", "abcd1235").add("name", "Doe").add("age", 34)
        sql, params = InsertStatement().build("person", None, queries)
        assert sql == "INSERT INTO person (id, name, age) VALUES ($1, $2, $3)"
        assert params == ["abcd1235", "Doe", 34]

    def test_insert_with_assignments(self):
        queries = Queries().add("id", QuerySet, "abcd1235").add("name", QuerySet, "Doe")
        sql, params = InsertStatement().build("person", None, queries)
        assert sql == "INSERT INTO person (id, name) VALUES ($1, $2)"
        assert params == ["abcd1235", "Doe"]

    def test_insert_uses_first_value_of_each_entry(self):
        sql, params = InsertStatement().build("person", None, Queries().add("age", 18, 21))
        assert sql == "INSERT INTO person (age) VALUES ($1)"
        assert params == [18]

    def test_insert_skips_entries_without_value(self):
        queries = Queries().add("id", "a").add("x", QueryIn).add("age", 3)
        sql, params = InsertStatement().build("p", None, queries)
        assert sql == "INSERT INTO p (id, age) VALUES ($1, $2)"
        assert params == ["a", 3]


class TestUpdateStatement:

    def test_update(self):
        queries = Queries().add("age", 18).add("age", QuerySet, 25)
        sql, params = UpdateStatement().build("person", ["id", "name", "age"], queries)
        assert sql == "UPDATE person SET age = $2 WHERE age = $1"
        assert params == [18, 25]

    def test_update_numbers_assignments_after_filters(self):
        queries = (
            Queries()
            .add("id", "a", "b")
            .add("name", QuerySet, "Doe")
            .add("age", QuerySet, 25)
        )
        sql, params = UpdateStatement().build("person", None, queries)
        assert sql == "UPDATE person SET name = $3, age = $4 WHERE id IN ($1, $2)"
        assert params == ["a", "b", "Doe", 25]

    def test_update_without_filter_is_refused(self, caplog):
        queries = Queries().add("age", QuerySet, 25)
        with caplog.at_level(logging.WARNING):
            assert UpdateStatement().build("person", None, queries) == ("", [])
        assert "without a WHERE clause" in caplog.text

    def test_update_without_assignment_is_refused(self, caplog):
        queries = Queries().add("age", 18)
        with caplog.at_level(logging.WARNING):
            assert UpdateStatement().build("person", None, queries) == ("", [])
        assert "without any assignment" in caplog.text


class TestDeleteStatement:

    def test_delete_all(self):
        assert DeleteStatement().build("person", None, Queries()) == ("DELETE FROM person", [])

    def test_delete_with_filter(self):
        sql, params = DeleteStatement().build("person", None, Queries().add("age", QueryGreater, 50))
        assert sql == "DELETE FROM person WHERE age > $1"
        assert params == [50]


class TestWithDB:

    def test_with_db_returns_a_bound_copy(self, fake_db):
        builder = SelectStatement()
        bound = builder.with_db(fake_db)
        assert bound is not builder
        assert isinstance(bound, SelectStatement)
        assert bound.db is fake_db
        assert builder.db is None

    def test_with_db_uses_db_logger(self, fake_db):
        bound = DeleteStatement().with_db(fake_db)
        assert bound.logger.name == "sql.fake.statement"

    def test_with_db_without_logger(self):
        bound = InsertStatement().with_db(object())
        assert bound.logger.name == "sql.statement"

    def test_bound_builder_builds_the_same(self, fake_db):
        queries = Queries().add("name", "Doe")
        assert SelectStatement().with_db(fake_db).build("person", ["id"], queries) == \
            SelectStatement().build("person", ["id"], queries)

    def test_statement_is_abstract(self):
        with pytest.raises(TypeError):
            Statement()
