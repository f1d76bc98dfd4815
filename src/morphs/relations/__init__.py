import inspect
from typing import Any

from sqlalchemy.orm import QueryableAttribute

from ..base import MorphSpec
from ..exceptions import AmbiguousRelationshipName
from .descriptors import MorphDescriptor
from .registry import MorphRegistry
from .resolver import POLYMORPHIC_COUNT, Association, resolve


def _inherited_registry(cls: Any) -> tuple[MorphRegistry, set[str]]:
    """
    Merge the declarations of every base, most distant ancestor first.

    Model bases contribute their ``__morphs__``. Plain mixins still hold raw
    ``MorphSpec`` attributes; their names are returned so the subclass can
    install descriptors for them.
    """
    registry = MorphRegistry()
    mixed: set[str] = set()
    for base in reversed(cls.__mro__[1:]):
        own = base.__dict__.get("__morphs__")
        if isinstance(own, MorphRegistry):
            registry = registry.merge(own)
        specs = {
            name: value
            for name, value in base.__dict__.items()
            if isinstance(value, MorphSpec)
        }
        if specs:
            registry = registry.merge(MorphRegistry.from_specs(specs))
            mixed.update(specs)
    return registry, mixed


def _check_shadowing(cls: Any, name: str) -> None:
    own = cls.__dict__.get(name)
    if name in inspect.get_annotations(cls) or (
        own is not None and not isinstance(own, MorphSpec)
    ):
        raise AmbiguousRelationshipName(
            f"Relationship '{name}' on '{cls.__name__}' shadows the mapped "
            f"attribute '{cls.__name__}.{name}'"
        )
    for base in cls.__mro__[1:]:
        if isinstance(base.__dict__.get(name), QueryableAttribute):
            raise AmbiguousRelationshipName(
                f"Relationship '{name}' on '{cls.__name__}' shadows the mapped "
                f"attribute '{base.__name__}.{name}'"
            )


def collect_morphs(cls: Any) -> MorphRegistry:
    """
    Gather the polymorphic declarations of a model class being defined.

    Declarations come from class attributes holding a ``MorphSpec``, from an
    explicit ``__morphs__`` registry in the class body and from plain mixins.
    They are merged over the registries of all parent models, stored back on
    ``cls.__morphs__`` and every name the class answers to with a raw
    declaration is replaced with a ``MorphDescriptor``.

    Raises:
        AmbiguousRelationshipName: If a name is declared twice in the class
            body, under two kinds, or shadows a mapped attribute.
    """
    inherited, mixed = _inherited_registry(cls)
    explicit = cls.__dict__.get("__morphs__")

    declared: dict[str, MorphSpec] = {}
    if explicit is not None:
        for name in explicit.names():
            declared[name] = explicit.get(explicit.kind_of(name), name)

    for name, value in list(cls.__dict__.items()):
        if not isinstance(value, MorphSpec):
            continue
        if name in declared:
            raise AmbiguousRelationshipName(
                f"Relationship '{name}' on '{cls.__name__}' is declared twice"
            )
        declared[name] = value

    registry = inherited.merge(MorphRegistry.from_specs(declared))
    # Mixin declarations are only reachable as raw specs until replaced here
    pending = [
        name
        for name in mixed
        if name not in declared
        and isinstance(inspect.getattr_static(cls, name, None), MorphSpec)
    ]
    for name in [*declared, *pending]:
        _check_shadowing(cls, name)

    cls.__morphs__ = registry
    for name in [*declared, *pending]:
        spec = registry.get(registry.kind_of(name), name)
        setattr(cls, name, MorphDescriptor(name, spec))
    return registry


__all__ = [
    "Association",
    "MorphDescriptor",
    "MorphRegistry",
    "POLYMORPHIC_COUNT",
    "collect_morphs",
    "resolve",
]
