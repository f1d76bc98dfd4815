from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class MorphKind(str, Enum):
    """The three polymorphic relationship shapes, in resolution order."""

    MORPH_ONE_OR_MANY = "morph_one_or_many"
    MORPH_TO = "morph_to"
    MORPH_MANY_THROUGH = "morph_many_through"


class MorphSpec(BaseModel):
    """
    Common base for polymorphic relationship declarations.

    Every declaration names a base column from which the ``<column>_id`` and
    ``<column>_type`` pair is derived. Which table holds the pair depends on
    the relationship kind.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ClassVar[MorphKind]

    column: str = Field(min_length=1)

    @property
    def field_id(self) -> str:
        return f"{self.column}_id"

    @property
    def field_type(self) -> str:
        return f"{self.column}_type"


class MorphTo(MorphSpec):
    """
    Metadata for a record that references one object of a variable type.

    The ``_id`` and ``_type`` columns live on the declaring model. The target
    model is not configured: it is read from the record's ``_type`` value.

    Example:
        >>> class Event(Model):
        ...     __tablename__ = "events"
        ...     eventable_id: Mapped[int | None]
        ...     eventable_type: Mapped[str | None]
        ...     eventable_object = MorphTo("eventable")
    """

    kind: ClassVar[MorphKind] = MorphKind.MORPH_TO

    def __init__(self, column: str | None = None, /, **data):
        """
        Initialize a morph-to declaration.

        Args:
            column: Base name of the ``<column>_id`` / ``<column>_type`` pair.
        """
        if column is not None:
            data["column"] = column
        super().__init__(**data)


class MorphOneOrMany(MorphSpec):
    """
    Metadata for the inverse of a morph-to: rows of ``model`` point back here.

    The ``_id`` and ``_type`` columns live on the target model's table.
    """

    kind: ClassVar[MorphKind] = MorphKind.MORPH_ONE_OR_MANY

    model: str = Field(min_length=1)
    single: bool = False
    """Resolve to a single object (has-one) instead of a query (has-many)."""


class MorphManyThrough(MorphSpec):
    """
    Metadata for a many-to-many association routed through a pivot table.

    The pivot holds the ``_id`` / ``_type`` pair for the polymorphic edge and
    an ordinary key column, ``foreign_or_far_key``, for the other edge.
    ``polymorphic_start`` selects the direction:

    * ``True``: the owner is matched against the pivot's polymorphic pair and
      the target joins through ``foreign_or_far_key``.
    * ``False``: the owner is matched against ``foreign_or_far_key`` and the
      target joins through the pivot's ``_id`` column.
    """

    kind: ClassVar[MorphKind] = MorphKind.MORPH_MANY_THROUGH

    model: str = Field(min_length=1)
    pivot: str = Field(min_length=1)
    foreign_or_far_key: str = Field(min_length=1)
    polymorphic_start: bool
