import pytest
from pydantic import ValidationError

from morphs import MorphKind, MorphManyThrough, MorphOneOrMany, MorphTo


def test_morph_to_derives_column_pair():
    """A morph-to declaration derives its _id/_type pair from the base name."""
    spec = MorphTo("eventable")

    assert spec.column == "eventable"
    assert spec.field_id == "eventable_id"
    assert spec.field_type == "eventable_type"
    assert spec.kind is MorphKind.MORPH_TO


def test_morph_to_accepts_keyword_column():
    assert MorphTo(column="imageable") == MorphTo("imageable")


def test_morph_one_or_many_defaults_to_many():
    spec = MorphOneOrMany(model="Upvote", column="upvoteable")

    assert spec.single is False
    assert spec.field_id == "upvoteable_id"
    assert spec.field_type == "upvoteable_type"
    assert spec.kind is MorphKind.MORPH_ONE_OR_MANY


def test_morph_many_through_fields():
    spec = MorphManyThrough(
        model="Project",
        column="taggable",
        pivot="taggables",
        foreign_or_far_key="tag_id",
        polymorphic_start=True,
    )

    assert spec.pivot == "taggables"
    assert spec.foreign_or_far_key == "tag_id"
    assert spec.polymorphic_start is True
    assert spec.field_id == "taggable_id"
    assert spec.kind is MorphKind.MORPH_MANY_THROUGH


def test_declarations_are_immutable():
    """Declarations are frozen once built."""
    spec = MorphOneOrMany(model="Upvote", column="upvoteable")

    with pytest.raises(ValidationError):
        spec.single = True


def test_declarations_are_hashable():
    assert len({MorphTo("a"), MorphTo("a"), MorphTo("b")}) == 2


def test_missing_required_fields_are_rejected():
    with pytest.raises(ValidationError):
        MorphManyThrough(model="Project", column="taggable", pivot="taggables")

    with pytest.raises(ValidationError):
        MorphOneOrMany(column="upvoteable")


def test_empty_column_is_rejected():
    with pytest.raises(ValidationError):
        MorphTo("")


def test_unknown_fields_are_rejected():
    """A typo in a declaration fails loudly instead of being ignored."""
    with pytest.raises(ValidationError):
        MorphOneOrMany(model="Upvote", column="upvoteable", singel=True)
