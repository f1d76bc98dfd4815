"""Discriminator naming shared by every polymorphic comparison."""

from typing import Any

import inflection


def singular(name: str) -> str:
    """Return the singular form of a table or model name."""
    return inflection.singularize(name)


def morph_name(model_cls: Any) -> str:
    """
    Return the value stored in ``<column>_type`` columns for a model.

    This is the singular form of the model's table name, e.g. ``websites``
    becomes ``website``. All type discriminator comparisons go through this
    function so both sides of a pivot agree on the stored value.
    """
    table = getattr(model_cls, "__table__", None)
    return singular(table.name if table is not None else model_cls.__tablename__)
