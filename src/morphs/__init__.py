"""
Morphs: polymorphic relationships for SQLAlchemy models.

Morphs resolves morph-to, morph-one-or-many and morph-many-through
relationships from declarative metadata into lazy, composable queries.
"""

import logging

from .base import MorphKind, MorphManyThrough, MorphOneOrMany, MorphSpec, MorphTo
from .engine import (
    clear_registry,
    connect,
    create_tables,
    lookup_model,
    reset_engine,
    transaction,
)
from .exceptions import (
    AmbiguousRelationshipName,
    MisconfiguredAssociation,
    MorphError,
    UndefinedAttribute,
)
from .models import Model
from .naming import morph_name
from .query import Query
from .relations import Association, MorphRegistry

# Set up the Morphs logger
_logger = logging.getLogger("morphs")
# Only add a handler if none exists (to avoid duplicate logs)
if not _logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("%(name)s: %(levelname)s: %(message)s"))
    _logger.addHandler(_handler)
    _logger.setLevel(logging.INFO)
    # Prevent propagation to root logger to avoid duplicate messages
    _logger.propagate = False


__all__ = [
    "connect",
    "create_tables",
    "reset_engine",
    "clear_registry",
    "lookup_model",
    "transaction",
    "Model",
    "Query",
    "MorphKind",
    "MorphSpec",
    "MorphTo",
    "MorphOneOrMany",
    "MorphManyThrough",
    "MorphRegistry",
    "Association",
    "morph_name",
    "MorphError",
    "UndefinedAttribute",
    "MisconfiguredAssociation",
    "AmbiguousRelationshipName",
]
