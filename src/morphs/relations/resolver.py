import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import column, false, func, table
from sqlalchemy import inspect as sa_inspect

from ..base import MorphKind
from ..engine import lookup_model
from ..exceptions import MisconfiguredAssociation, UndefinedAttribute
from ..naming import morph_name
from ..query import Query
from .registry import MorphRegistry

logger = logging.getLogger("morphs.relations")

POLYMORPHIC_COUNT = "polymorphic_count"


@dataclass(frozen=True)
class Association:
    """
    Result of resolving a polymorphic relationship on one record.

    Attributes:
        name: The relationship name that was resolved.
        kind: Which of the three polymorphic shapes produced it.
        single: True when the association holds at most one object.
        query: The lazy query, or None when a morph-to reference is dangling
            and no query needs to run.
    """

    name: str
    kind: MorphKind
    single: bool
    query: Query | None

    async def fetch(self) -> Any:
        """
        Execute the association.

        Returns:
            The associated object or None for single associations, a list of
            objects otherwise.
        """
        if self.query is None:
            return None if self.single else []
        if self.single:
            return await self.query.first()
        return await self.query.all()


def resolve(record: Any, name: str) -> Any:
    """
    Resolve ``name`` on ``record`` without touching the database.

    Mapped attributes and static relationships come first and are returned
    unchanged. Otherwise the name is looked up in the model's polymorphic
    registry and the matching query is built.

    Raises:
        UndefinedAttribute: If nothing on the model answers to ``name``.
        MisconfiguredAssociation: If a declaration names an unknown model or
            a column the target model does not map.
    """
    model_cls = type(record)
    if name in sa_inspect(model_cls).attrs:
        return getattr(record, name)

    registry: MorphRegistry = getattr(model_cls, "__morphs__", MorphRegistry())
    kind = registry.kind_of(name)
    if kind is None:
        from .descriptors import MorphDescriptor

        # A descriptor missing from the registry would resolve itself forever
        if isinstance(getattr(model_cls, name, None), MorphDescriptor):
            raise UndefinedAttribute(model_cls.__name__, name)
        try:
            return getattr(record, name)
        except AttributeError:
            raise UndefinedAttribute(model_cls.__name__, name) from None

    logger.debug("Resolving %s.%s as %s", model_cls.__name__, name, kind.value)
    if kind is MorphKind.MORPH_ONE_OR_MANY:
        return _morph_one_or_many(record, registry, name)
    if kind is MorphKind.MORPH_TO:
        return _morph_to(record, registry, name)
    return _morph_many_through(record, registry, name)


def _target(registry: MorphRegistry, kind: MorphKind, name: str) -> Any:
    model_name = registry.target_model(kind, name)
    model_cls = lookup_model(model_name)
    if model_cls is None:
        raise MisconfiguredAssociation(
            f"Relationship '{name}' targets unknown model '{model_name}'"
        )
    return model_cls


def _mapped_column(model_cls: Any, key: str) -> Any:
    attr = sa_inspect(model_cls).all_orm_descriptors.get(key)
    if attr is None:
        raise MisconfiguredAssociation(
            f"Model '{model_cls.__name__}' has no column '{key}'"
        )
    return attr


def _owner_key(record: Any) -> Any:
    return record.primary_key_value()


def _morph_one_or_many(
    record: Any, registry: MorphRegistry, name: str
) -> Association:
    kind = MorphKind.MORPH_ONE_OR_MANY
    target = _target(registry, kind, name)
    owner_key = _owner_key(record)

    query = Query(target)
    if owner_key is None:
        # Unsaved owners have nothing pointing at them
        query.where(false())
    else:
        query.where(
            _mapped_column(target, registry.field_id(kind, name)) == owner_key,
            _mapped_column(target, registry.field_type(kind, name))
            == morph_name(type(record)),
        )
    return Association(name, kind, registry.get(kind, name).single, query)


def _morph_to(record: Any, registry: MorphRegistry, name: str) -> Association:
    kind = MorphKind.MORPH_TO
    type_value = record.attribute(registry.field_type(kind, name))
    id_value = record.attribute(registry.field_id(kind, name))

    if id_value is None or not type_value:
        return Association(name, kind, True, None)

    target = lookup_model(type_value)
    if target is None:
        logger.warning(
            "%s.%s references unknown type '%s'",
            type(record).__name__,
            name,
            type_value,
        )
        return Association(name, kind, True, None)

    query = Query(target).where(target.primary_key_column() == id_value)
    return Association(name, kind, True, query)


def _morph_many_through(
    record: Any, registry: MorphRegistry, name: str
) -> Association:
    kind = MorphKind.MORPH_MANY_THROUGH
    target = _target(registry, kind, name)
    field_id = registry.field_id(kind, name)
    field_type = registry.field_type(kind, name)
    far_key = registry.foreign_or_far_key(name)
    pivot = table(
        registry.pivot_table(name),
        column(field_id),
        column(field_type),
        column(far_key),
    )
    target_key = target.primary_key_column()
    owner_key = _owner_key(record)

    if registry.is_polymorphic_start(name):
        # Owner sits on the pivot's polymorphic pair, target on the plain key
        onclause = pivot.c[far_key] == target_key
        owner_match = pivot.c[field_id] == owner_key
        discriminator = morph_name(type(record))
    else:
        # Owner sits on the plain key, target on the polymorphic pair
        onclause = pivot.c[field_id] == target_key
        owner_match = pivot.c[far_key] == owner_key
        discriminator = morph_name(target)

    polymorphic_count = func.count(pivot.c[field_id])
    query = (
        Query(target)
        .outerjoin(pivot, onclause)
        .where(
            owner_match if owner_key is not None else false(),
            pivot.c[field_type] == discriminator,
        )
        .group_by(target_key)
        .add_columns(polymorphic_count.label(POLYMORPHIC_COUNT))
        .having(polymorphic_count > 0)
    )
    return Association(name, kind, False, query)
