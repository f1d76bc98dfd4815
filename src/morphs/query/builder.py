"""Build fluent query objects over SQLAlchemy select statements"""

from typing import Any, Generic, Type, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.engine import Dialect

from ..engine import session_scope

T = TypeVar("T")


class Query(Generic[T]):
    """Build and execute fluent ORM queries.

    Builder methods only accumulate clauses on the underlying ``Select``;
    nothing touches the database until ``all()``, ``first()``, ``count()`` or
    ``exists()`` is awaited.

    Attributes:
        model_cls: Model class used to hydrate results.
        statement: The accumulated SQLAlchemy ``Select``.
    """

    def __init__(self, model_cls: Type[T]):
        """Initialize a query for a model class.

        Args:
            model_cls: Model class that defines the target table.

        Examples:
            >>> query = Query(Website)
            >>> query.model_cls is Website
            True
        """
        self.model_cls = model_cls
        self.statement: Select = select(model_cls)

    def where(self, *criteria: Any) -> "Query[T]":
        """Add filter conditions to the query

        Args:
            *criteria: SQLAlchemy boolean expressions (e.g., Website.id == 1).
                Multiple criteria are combined with AND.

        Returns:
            The current Query instance for chaining.

        Examples:
            >>> query = Website.where(Website.id == 1)
            >>> isinstance(query, Query)
            True
        """
        self.statement = self.statement.where(*criteria)
        return self

    def join(self, target: Any, onclause: Any = None) -> "Query[T]":
        """Add an INNER JOIN against a table or model"""
        self.statement = self.statement.join(target, onclause)
        return self

    def outerjoin(self, target: Any, onclause: Any = None) -> "Query[T]":
        """Add a LEFT OUTER JOIN against a table or model"""
        self.statement = self.statement.outerjoin(target, onclause)
        return self

    def group_by(self, *columns: Any) -> "Query[T]":
        """Group result rows by the given columns"""
        self.statement = self.statement.group_by(*columns)
        return self

    def add_columns(self, *columns: Any) -> "Query[T]":
        """Select additional computed columns next to the model

        Results still hydrate only the model; extra columns are available to
        ``having()`` and ``order_by()``.
        """
        self.statement = self.statement.add_columns(*columns)
        return self

    def having(self, *criteria: Any) -> "Query[T]":
        """Filter grouped rows after aggregation"""
        self.statement = self.statement.having(*criteria)
        return self

    def order_by(self, field: Any, direction: str = "asc") -> "Query[T]":
        """Add an ordering clause to the query

        Args:
            field: The column to order by (e.g., Website.name).
            direction: The direction of the sort ("asc" or "desc").

        Returns:
            The current Query instance for chaining.

        Raises:
            ValueError: If direction is not "asc" or "desc".
        """
        if direction.lower() not in ("asc", "desc"):
            raise ValueError("direction must be 'asc' or 'desc'")

        column = field.desc() if direction.lower() == "desc" else field.asc()
        self.statement = self.statement.order_by(column)
        return self

    def limit(self, value: int) -> "Query[T]":
        """Limit the number of records returned"""
        self.statement = self.statement.limit(value)
        return self

    def offset(self, value: int) -> "Query[T]":
        """Skip a specific number of records"""
        self.statement = self.statement.offset(value)
        return self

    async def all(self) -> list[T]:
        """Return all model instances that match the current query

        Returns:
            A list of model instances.

        Examples:
            >>> upvotes = await website.upvotes.all()
            >>> isinstance(upvotes, list)
            True
        """
        async with session_scope() as session:
            result = await session.scalars(self.statement)
            return list(result.unique())

    async def first(self) -> T | None:
        """Return the first matching record, or None

        Returns:
            A model instance or None.
        """
        async with session_scope() as session:
            result = await session.scalars(self.statement.limit(1))
            return result.first()

    async def count(self) -> int:
        """Return the number of records that match the current query

        Returns:
            The count of matching records.
        """
        counted = select(func.count()).select_from(self.statement.subquery())
        async with session_scope() as session:
            return await session.scalar(counted)

    async def exists(self) -> bool:
        """Return whether at least one record matches the current query"""
        return await self.count() > 0

    def to_sql(self, dialect: Dialect | None = None) -> str:
        """Render the statement as SQL with literal parameter values

        Args:
            dialect: Dialect to compile for. Defaults to SQLAlchemy's
                generic dialect.

        Examples:
            >>> print(Website.where(Website.id == 7).to_sql())
            SELECT websites.id, websites.name
            FROM websites
            WHERE websites.id = 7
        """
        compiled = self.statement.compile(
            dialect=dialect, compile_kwargs={"literal_binds": True}
        )
        return str(compiled)

    def __repr__(self):
        """Return a developer-friendly representation of the query"""
        return f"<Query model={self.model_cls.__name__} sql={str(self.statement)!r}>"
