from typing import Any, ClassVar, Self

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import DeclarativeBase, InstrumentedAttribute

from .engine import register_model, session_scope
from .exceptions import MisconfiguredAssociation
from .naming import morph_name as _morph_name
from .query import Query
from .relations import Association, MorphRegistry, collect_morphs, resolve


class Model(DeclarativeBase):
    """
    Base class for all morphs models.

    A SQLAlchemy declarative base with asynchronous active-record helpers.
    Polymorphic relationships are declared as class attributes:

        >>> class Website(Model):
        ...     __tablename__ = "websites"
        ...     id: Mapped[int] = mapped_column(primary_key=True)
        ...     upvotes = MorphOneOrMany(model="Upvote", column="upvoteable")

        >>> upvotes = await website.upvotes.all()
    """

    __morphs__: ClassVar[MorphRegistry] = MorphRegistry()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        # Descriptors must be in place before the declarative scan runs
        collect_morphs(cls)
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get("__abstract__", False):
            register_model(cls)

    @classmethod
    def primary_key_column(cls) -> InstrumentedAttribute:
        """
        Return the mapped attribute of the single-column primary key.

        Raises:
            MisconfiguredAssociation: If the primary key spans several columns.
        """
        mapper = sa_inspect(cls)
        if len(mapper.primary_key) != 1:
            raise MisconfiguredAssociation(
                f"Model '{cls.__name__}' needs a single-column primary key"
            )
        return mapper.get_property_by_column(mapper.primary_key[0]).class_attribute

    @classmethod
    def morph_name(cls) -> str:
        """Return the value stored in ``_type`` columns that point at this model."""
        return _morph_name(cls)

    def primary_key_value(self) -> Any:
        return getattr(self, self.primary_key_column().key)

    def attribute(self, name: str) -> Any:
        """Read a column value by name."""
        return getattr(self, name)

    def relation(self, name: str) -> Association | Any:
        """
        Resolve a relationship by name without executing it.

        Args:
            name: A polymorphic relationship, static relationship or column.

        Returns:
            An ``Association`` for polymorphic relationships; the plain
            attribute value for anything the model maps itself.

        Raises:
            UndefinedAttribute: If the model has nothing called ``name``.

        Example:
            >>> association = website.relation("upvotes")
            >>> upvotes = await association.fetch()
        """
        return resolve(self, name)

    async def save(self) -> None:
        """
        Persist the model instance to the database.

        New instances are inserted and receive their generated primary key;
        detached instances are re-attached and their changes flushed.
        """
        async with session_scope() as session:
            session.add(self)
            await session.flush()

    async def delete(self) -> None:
        """Delete the model instance from the database."""
        async with session_scope() as session:
            await session.delete(await session.merge(self))

    async def refresh(self) -> None:
        """
        Reload the model instance's fields from the database.

        Raises:
            RuntimeError: If the instance has no primary key value.
        """
        if self.primary_key_value() is None:
            raise RuntimeError("Cannot refresh a model without a primary key")

        async with session_scope() as session:
            session.add(self)
            await session.refresh(self)

    @classmethod
    async def create(cls, **kwargs) -> Self:
        """
        Create and persist a new model instance.
        """
        instance = cls(**kwargs)
        await instance.save()
        return instance

    @classmethod
    async def get(cls, value: Any) -> Self | None:
        """
        Fetch a single record by primary key.

        Args:
            value: The primary key value to look up.

        Returns:
            Self | None: The model instance if found, otherwise None.
        """
        async with session_scope() as session:
            return await session.get(cls, value)

    @classmethod
    async def all(cls) -> list[Self]:
        """Fetch all records for this model."""
        return await Query(cls).all()

    @classmethod
    def where(cls, *criteria: Any) -> Query:
        """
        Start a fluent query with a condition.

        Args:
            *criteria: SQLAlchemy expressions (e.g., Website.name == "a.com").

        Returns:
            Query: A query builder object.
        """
        return Query(cls).where(*criteria)

    @classmethod
    def select(cls) -> Query:
        """Start a fluent query over every record."""
        return Query(cls)
