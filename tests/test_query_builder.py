import pytest
from sqlalchemy.dialects import sqlite

from morphs import Query
from tests.models import Tag, Website


def sql(query: Query) -> str:
    return " ".join(query.to_sql().split())


def test_model_where_clause():
    """
    Test that Model.where() returns a Query object with the correct condition.
    """
    query = Website.where(Website.name == "example.com")

    assert isinstance(query, Query)
    assert query.model_cls is Website
    assert "WHERE websites.name = 'example.com'" in sql(query)


def test_query_chaining():
    """
    Test that Query object supports chaining without executing anything.
    """
    query = (
        Website.select()
        .where(Website.id > 1)
        .order_by(Website.name, "desc")
        .limit(10)
        .offset(5)
    )

    rendered = sql(query)
    assert "WHERE websites.id > 1" in rendered
    assert "ORDER BY websites.name DESC" in rendered
    assert "LIMIT 10 OFFSET 5" in rendered


def test_multiple_criteria_are_anded():
    query = Website.where(Website.id == 1, Website.name == "a")
    assert "WHERE websites.id = 1 AND websites.name = 'a'" in sql(query)


def test_invalid_order_direction():
    with pytest.raises(ValueError, match="direction must be"):
        Website.select().order_by(Website.name, "sideways")


def test_aggregate_clauses():
    from sqlalchemy import func

    count = func.count(Website.id)
    query = (
        Tag.select()
        .outerjoin(Website, Website.id == Tag.id)
        .group_by(Tag.id)
        .add_columns(count.label("n"))
        .having(count > 0)
    )

    rendered = sql(query)
    assert "LEFT OUTER JOIN websites ON websites.id = tags.id" in rendered
    assert "GROUP BY tags.id" in rendered
    assert "count(websites.id) AS n" in rendered
    assert "HAVING count(websites.id) > 0" in rendered


def test_to_sql_with_dialect():
    query = Website.where(Website.id == 3)
    assert "websites.id = 3" in query.to_sql(sqlite.dialect())


def test_repr():
    assert repr(Website.select()).startswith("<Query model=Website")


@pytest.mark.asyncio
async def test_execution_helpers(db):
    await Website.create(name="a.com")
    await Website.create(name="b.com")
    await Website.create(name="c.com")

    names = [w.name for w in await Website.select().order_by(Website.name).all()]
    assert names == ["a.com", "b.com", "c.com"]

    assert await Website.where(Website.name != "a.com").count() == 2
    assert await Website.where(Website.name == "b.com").exists()
    assert not await Website.where(Website.name == "z.com").exists()

    first = await Website.select().order_by(Website.name, "desc").first()
    assert first.name == "c.com"
    assert await Website.where(Website.name == "z.com").first() is None


@pytest.mark.asyncio
async def test_execution_requires_connection():
    with pytest.raises(RuntimeError, match="not connected"):
        await Website.select().all()
