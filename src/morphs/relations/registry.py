from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..base import MorphKind, MorphManyThrough, MorphOneOrMany, MorphSpec, MorphTo
from ..exceptions import AmbiguousRelationshipName, MisconfiguredAssociation

# Order in which kinds are consulted when resolving a name
RESOLUTION_ORDER = (
    MorphKind.MORPH_ONE_OR_MANY,
    MorphKind.MORPH_TO,
    MorphKind.MORPH_MANY_THROUGH,
)


class MorphRegistry(BaseModel):
    """
    Immutable per-model table of polymorphic relationship declarations.

    Attributes:
        morph_to: Relationship name to morph-to declaration.
        morph_one_or_many: Relationship name to morph-one-or-many declaration.
        morph_many_through: Relationship name to morph-many-through declaration.

    Examples:
        >>> registry = MorphRegistry(
        ...     morph_one_or_many={
        ...         "upvotes": MorphOneOrMany(model="Upvote", column="upvoteable")
        ...     }
        ... )
        >>> registry.field_id(MorphKind.MORPH_ONE_OR_MANY, "upvotes")
        'upvoteable_id'
    """

    model_config = ConfigDict(frozen=True)

    morph_to: Mapping[str, MorphTo] = Field(
        default_factory=dict, validate_default=True
    )
    morph_one_or_many: Mapping[str, MorphOneOrMany] = Field(
        default_factory=dict, validate_default=True
    )
    morph_many_through: Mapping[str, MorphManyThrough] = Field(
        default_factory=dict, validate_default=True
    )

    @field_validator(
        "morph_to", "morph_one_or_many", "morph_many_through", mode="after"
    )
    @classmethod
    def _freeze(cls, value: Mapping[str, MorphSpec]) -> Mapping[str, MorphSpec]:
        return MappingProxyType(dict(value))

    @model_validator(mode="after")
    def _reject_overlapping_names(self) -> "MorphRegistry":
        seen: dict[str, MorphKind] = {}
        for kind in RESOLUTION_ORDER:
            for name in self._table(kind):
                if name in seen:
                    raise AmbiguousRelationshipName(
                        f"Relationship '{name}' is declared as both "
                        f"{seen[name].value} and {kind.value}"
                    )
                seen[name] = kind
        return self

    @classmethod
    def from_specs(cls, specs: Mapping[str, MorphSpec]) -> "MorphRegistry":
        """Build a registry from a flat name -> declaration mapping."""
        tables: dict[str, dict[str, MorphSpec]] = {kind.value: {} for kind in MorphKind}
        for name, spec in specs.items():
            tables[spec.kind.value][name] = spec
        return cls(**tables)

    def _table(self, kind: MorphKind) -> Mapping[str, MorphSpec]:
        return getattr(self, MorphKind(kind).value)

    def merge(self, other: "MorphRegistry") -> "MorphRegistry":
        """
        Return a registry holding the declarations of both registries.

        Declarations in ``other`` replace same-kind declarations of the same
        name, so a subclass can redefine an inherited relationship. Redefining
        it under a different kind is ambiguous and rejected.
        """
        return MorphRegistry(
            **{
                kind.value: {**self._table(kind), **other._table(kind)}
                for kind in MorphKind
            }
        )

    def names(self) -> list[str]:
        return [name for kind in RESOLUTION_ORDER for name in self._table(kind)]

    def __contains__(self, name: str) -> bool:
        return self.kind_of(name) is not None

    def __bool__(self) -> bool:
        return bool(self.names())

    def kind_of(self, name: str) -> MorphKind | None:
        """Return the kind ``name`` is declared under, or None."""
        for kind in RESOLUTION_ORDER:
            if name in self._table(kind):
                return kind
        return None

    def get(self, kind: MorphKind, name: str) -> MorphSpec:
        """
        Return the declaration of ``name`` under ``kind``.

        Raises:
            KeyError: If ``name`` is not declared under ``kind``.
        """
        return self._table(kind)[name]

    def field_id(self, kind: MorphKind, name: str) -> str:
        return self.get(kind, name).field_id

    def field_type(self, kind: MorphKind, name: str) -> str:
        return self.get(kind, name).field_type

    def target_model(self, kind: MorphKind, name: str) -> str:
        """
        Return the configured target model name.

        Raises:
            MisconfiguredAssociation: For morph-to, whose target is read from
                the record's ``_type`` column instead of configuration.
        """
        spec = self.get(kind, name)
        if isinstance(spec, MorphTo):
            raise MisconfiguredAssociation(
                f"Morph-to relationship '{name}' has no configured target model"
            )
        return spec.model

    def pivot_table(self, name: str) -> str:
        return self.morph_many_through[name].pivot

    def foreign_or_far_key(self, name: str) -> str:
        return self.morph_many_through[name].foreign_or_far_key

    def is_polymorphic_start(self, name: str) -> bool:
        return self.morph_many_through[name].polymorphic_start
