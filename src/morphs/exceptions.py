class MorphError(Exception):
    """Base class for errors raised by the polymorphic relationship layer."""


class UndefinedAttribute(MorphError, AttributeError):
    """The name is neither a polymorphic relationship nor a model attribute."""

    def __init__(self, model_name: str, name: str):
        super().__init__(f"'{model_name}' has no attribute or relationship '{name}'")
        self.model_name = model_name
        self.name = name


class MisconfiguredAssociation(MorphError, RuntimeError):
    """A declaration references a model or column that does not exist."""


class AmbiguousRelationshipName(MorphError):
    """A relationship name is declared under more than one kind."""
