import pytest

from morphs import (
    Association,
    MisconfiguredAssociation,
    MorphKind,
    MorphTo,
    UndefinedAttribute,
    transaction,
)
from morphs.relations import MorphDescriptor, resolve
from tests.models import Ghost, Post, Project, Tag, Upvote, Website


def test_dispatch_by_kind():
    website = Website(id=1, name="a")
    upvote = Upvote(upvoteable_id=1, upvoteable_type="website")
    tag = Tag(id=1, name="t")

    assert resolve(website, "upvotes").kind is MorphKind.MORPH_ONE_OR_MANY
    assert resolve(upvote, "upvoteable").kind is MorphKind.MORPH_TO
    assert resolve(tag, "projects").kind is MorphKind.MORPH_MANY_THROUGH


def test_columns_fall_through_to_the_model():
    website = Website(id=1, name="example.com")
    assert website.relation("name") == "example.com"
    assert website.relation("id") == 1


def test_plain_attributes_fall_through():
    assert Website(id=1, name="a").relation("morph_name") == Website.morph_name


def test_undefined_attribute():
    website = Website(id=1, name="a")

    with pytest.raises(UndefinedAttribute) as info:
        website.relation("downvotes")

    assert isinstance(info.value, AttributeError)
    assert info.value.name == "downvotes"
    assert "'Website' has no attribute or relationship 'downvotes'" in str(info.value)


def test_unknown_target_model_is_misconfigured():
    with pytest.raises(MisconfiguredAssociation, match="unknown model 'Castle'"):
        Ghost(id=1).relation("haunts")


def test_missing_target_column_is_misconfigured():
    with pytest.raises(MisconfiguredAssociation, match="no column 'shadowable_id'"):
        Ghost(id=1).relation("shadows")


def test_each_resolution_builds_a_fresh_query():
    project = Project(id=1, name="ferry")

    first = project.relation("tags")
    second = project.relation("tags")

    assert first is not second
    assert first.query is not second.query
    assert first.query.to_sql() == second.query.to_sql()


def test_chaining_does_not_leak_into_later_resolutions():
    website = Website(id=1, name="a")
    website.upvotes.where(Upvote.id == 5)

    assert "upvotes.id = 5" not in website.upvotes.to_sql()


@pytest.mark.asyncio
async def test_dangling_association_fetch():
    association = Association("x", MorphKind.MORPH_TO, True, None)
    assert await association.fetch() is None

    association = Association("x", MorphKind.MORPH_ONE_OR_MANY, False, None)
    assert await association.fetch() == []


@pytest.mark.asyncio
async def test_repeated_resolution_returns_same_rows(seeded):
    project = seeded["project"]

    first = await project.tags.order_by(Tag.id).all()
    second = await project.tags.order_by(Tag.id).all()

    assert [t.id for t in first] == [t.id for t in second]


@pytest.mark.asyncio
async def test_loaded_static_relationship_is_returned_unchanged(seeded):
    async with transaction():
        post = await Post.get(seeded["post"].id)
        comments = post.relation("comments")

    assert comments is post.comments
    assert comments == []


def test_unregistered_descriptor_is_undefined(monkeypatch):
    orphan = MorphDescriptor("orphan", MorphTo("orphanable"))
    monkeypatch.setattr(Website, "orphan", orphan, raising=False)

    with pytest.raises(UndefinedAttribute, match="'orphan'"):
        Website(id=1, name="a").relation("orphan")
