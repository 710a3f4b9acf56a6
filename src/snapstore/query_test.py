"""
Tests for the SelectQuery builder.

Run with: pytest src/snapstore/query_test.py -v
"""

import pytest

from snapstore.pagination import SortOrder
from snapstore.query import SelectQuery, quote_identifier


class TestQuoteIdentifier:
    """Tests for quote_identifier()"""

    @pytest.mark.parametrize("name,expected", [
        ("articles", '"articles"'),
        ("order", '"order"'),            # reserved word
        ("t.order", '"t"."order"'),      # dotted name, quoted per part
        ('weird"name', '"weird""name"'),  # embedded quote
    ])
    def test_quote_identifier(self, name, expected):
        assert quote_identifier(name) == expected


class TestToSql:
    """Tests for SelectQuery.to_sql()"""

    def test_base_select(self):
        query = SelectQuery("articles", "t")

        assert query.to_sql() == ('SELECT t.* FROM "articles" AS t', ())

    def test_without_alias(self):
        query = SelectQuery("articles")

        assert query.to_sql() == ('SELECT * FROM "articles"', ())

    def test_predicates_ordering_and_bounds(self):
        query = (
            SelectQuery("articles", "t")
            .where("t.status = %s", "draft")
            .where("t.rank >= %s", 2)
            .order_by("t.rank", "desc")
            .limit(5)
            .offset(10)
        )

        sql, params = query.to_sql()

        assert sql == (
            'SELECT t.* FROM "articles" AS t '
            "WHERE (t.status = %s) AND (t.rank >= %s) "
            "ORDER BY t.rank DESC LIMIT %s OFFSET %s"
        )
        assert params == ("draft", 2, 5, 10)

    def test_join_params_precede_where_params(self):
        query = (
            SelectQuery("articles", "t")
            .where("t.status = %s", "draft")
            .join("authors", "a", "a.id = t.author_id AND a.name <> %s", "nobody")
        )

        sql, params = query.to_sql()

        assert sql == (
            'SELECT t.* FROM "articles" AS t '
            'JOIN "authors" AS a ON a.id = t.author_id AND a.name <> %s '
            "WHERE (t.status = %s)"
        )
        assert params == ("nobody", "draft")
        assert query.tables == ["articles", "authors"]

    def test_disjunction_stays_inside_its_predicate(self):
        query = (
            SelectQuery("articles", "t")
            .where("t.status = %s OR t.rank = %s", "draft", 1)
            .where("t.published")
        )

        sql, params = query.to_sql()

        assert sql.endswith("WHERE (t.status = %s OR t.rank = %s) AND (t.published)")
        assert params == ("draft", 1)

    def test_select_replaces_and_add_select_appends(self):
        query = SelectQuery("articles", "t").select("t.id").add_select("t.title")

        assert query.to_sql()[0] == 'SELECT t.id, t.title FROM "articles" AS t'

    def test_sort_order_enum_accepted(self):
        query = SelectQuery("articles", "t").order_by("t.id", SortOrder.DESC)

        assert query.ordering == [("t.id", "DESC")]

    def test_invalid_direction_raises(self):
        with pytest.raises(ValueError):
            SelectQuery("articles", "t").order_by("t.id", "sideways")


class TestCountSql:
    """Tests for SelectQuery.count_sql()"""

    def test_count_ignores_order_and_bounds(self):
        query = (
            SelectQuery("articles", "t")
            .where("t.status = %s", "draft")
            .order_by("t.id")
            .limit(3)
            .offset(6)
        )

        sql, params = query.count_sql()

        assert sql == (
            "SELECT COUNT(*) AS total FROM "
            '(SELECT t.* FROM "articles" AS t WHERE (t.status = %s)) AS counted'
        )
        assert params == ("draft",)


class TestCopy:
    """Tests for SelectQuery.copy()"""

    def test_copy_is_independent(self):
        original = SelectQuery("articles", "t").where("t.rank > %s", 1)

        copied = original.copy().where("t.status = %s", "draft").limit(1)

        assert original.predicates == ["t.rank > %s"]
        assert copied.predicates == ["t.rank > %s", "t.status = %s"]
        assert original.to_sql()[1] == (1,)
