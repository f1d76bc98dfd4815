import os
import uuid

import pytest

from morphs import connect, lookup_model, reset_engine
from tests.models import (
    Event,
    Image,
    Post,
    Project,
    Tag,
    Taggable,
    Upvote,
    Website,
)


# This fixture ensures the test models are registered with the model factory
@pytest.fixture(scope="session", autouse=True)
def check_registry():
    """Verify that importing the test models registered them."""
    if lookup_model("Website") is not Website:
        pytest.fail("Test models are not registered. Is 'tests.models' importable?")


@pytest.fixture
def db_url():
    db_file = f"test_morphs_{uuid.uuid4()}.db"
    yield f"sqlite+aiosqlite:///{db_file}"
    if os.path.exists(db_file):
        os.remove(db_file)


@pytest.fixture
async def db(db_url):
    """
    Setup a clean SQLite database for each test.
    """
    await connect(db_url, auto_migrate=True)
    yield db_url
    await reset_engine()


@pytest.fixture
async def seeded(db):
    """Two owners of each kind with upvotes, images, tags and pivot rows."""
    site = await Website.create(name="example.com")
    other_site = await Website.create(name="example.org")
    post = await Post.create(title="Hello")
    project = await Project.create(name="ferry")
    other_project = await Project.create(name="dock")
    python = await Tag.create(name="python")
    rust = await Tag.create(name="rust")
    unused = await Tag.create(name="unused")

    upvotes = [
        await Upvote.create(upvoteable_id=site.id, upvoteable_type="website"),
        await Upvote.create(upvoteable_id=site.id, upvoteable_type="website"),
        await Upvote.create(upvoteable_id=post.id, upvoteable_type="post"),
        await Upvote.create(upvoteable_id=other_site.id, upvoteable_type="website"),
    ]
    logo = await Image.create(
        url="logo.png", imageable_id=site.id, imageable_type="website"
    )
    await Image.create(url="cover.png", imageable_id=post.id, imageable_type="post")

    for tag, owner_id, owner_type in [
        (python, project.id, "project"),
        (python, project.id, "project"),  # duplicate pivot row
        (rust, project.id, "project"),
        (rust, other_project.id, "project"),
        (python, post.id, "post"),
    ]:
        await Taggable.create(
            tag_id=tag.id, taggable_id=owner_id, taggable_type=owner_type
        )

    events = [
        await Event.create(eventable_id=project.id, eventable_type="project"),
        await Event.create(eventable_id=None, eventable_type=None),
        await Event.create(eventable_id=999, eventable_type="project"),
        await Event.create(eventable_id=project.id, eventable_type="spaceship"),
    ]

    return {
        "site": site,
        "other_site": other_site,
        "post": post,
        "project": project,
        "other_project": other_project,
        "python": python,
        "rust": rust,
        "unused": unused,
        "upvotes": upvotes,
        "logo": logo,
        "events": events,
    }
