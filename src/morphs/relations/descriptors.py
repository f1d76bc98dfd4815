from ..base import MorphSpec
from .resolver import resolve


class MorphDescriptor:
    """Descriptor that returns either a Query object or an awaitable single object."""

    def __init__(self, field_name: str, spec: MorphSpec):
        self.field_name = field_name
        self.spec = spec

    def __get__(self, instance, owner):
        if instance is None:
            return self

        association = resolve(instance, self.field_name)
        if association.single:
            return association.fetch()

        return association.query

    def __repr__(self):
        return f"MorphDescriptor({self.field_name!r}, {self.spec!r})"
