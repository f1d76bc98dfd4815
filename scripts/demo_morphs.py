# /// script
# dependencies = [
#     "morphs",
#     "rich",
# ]
# ///

import os

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from morphs import (
    Model,
    MorphManyThrough,
    MorphOneOrMany,
    MorphTo,
    connect,
    reset_engine,
    transaction,
)

console = Console()


def show_step(title: str, code: str):
    """Utility to display a code snippet and its title."""
    console.print(f"\n[bold blue]>>> {title}[/bold blue]")
    syntax = Syntax(code, "python", theme="monokai", line_numbers=False)
    console.print(Panel(syntax, expand=False, border_style="dim"))


# 1. Define models with polymorphic relationships
class Website(Model):
    __tablename__ = "websites"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))

    upvotes = MorphOneOrMany(model="Upvote", column="upvoteable")
    logo = MorphOneOrMany(model="Image", column="imageable", single=True)
    tags = MorphManyThrough(
        model="Tag",
        column="taggable",
        pivot="taggables",
        foreign_or_far_key="tag_id",
        polymorphic_start=True,
    )


class Project(Model):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))

    upvotes = MorphOneOrMany(model="Upvote", column="upvoteable")


class Upvote(Model):
    __tablename__ = "upvotes"

    id: Mapped[int] = mapped_column(primary_key=True)
    upvoteable_id: Mapped[int | None]
    upvoteable_type: Mapped[str | None] = mapped_column(String(50))

    upvoteable = MorphTo("upvoteable")


class Image(Model):
    __tablename__ = "images"

    id: Mapped[int] = mapped_column(primary_key=True)
    url: Mapped[str] = mapped_column(String(200))
    imageable_id: Mapped[int | None]
    imageable_type: Mapped[str | None] = mapped_column(String(50))


class Tag(Model):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50))

    websites = MorphManyThrough(
        model="Website",
        column="taggable",
        pivot="taggables",
        foreign_or_far_key="tag_id",
        polymorphic_start=False,
    )


class Taggable(Model):
    __tablename__ = "taggables"

    id: Mapped[int] = mapped_column(primary_key=True)
    tag_id: Mapped[int] = mapped_column(ForeignKey("tags.id"))
    taggable_id: Mapped[int]
    taggable_type: Mapped[str] = mapped_column(String(50))


async def run_demo():
    # Use a file-based SQLite DB for demo stability
    db_file = "demo.db"
    if os.path.exists(db_file):
        os.remove(db_file)

    console.print(
        Panel.fit(
            "[bold green]Morphs Polymorphic Relationships Demo[/bold green]",
            border_style="bold green",
        )
    )

    console.print(f"Connecting to {db_file}...")
    await connect(f"sqlite+aiosqlite:///{db_file}", auto_migrate=True)

    # 2. Seeding
    console.print("Seeding initial data...")

    async with transaction():
        site = await Website.create(name="example.com")
        docs = await Website.create(name="docs.example.com")
        engine = await Project.create(name="engine")
        orm = await Tag.create(name="orm")
        rust = await Tag.create(name="rust")

        owners = [(site, "website"), (site, "website"), (engine, "project")]
        for owner, owner_type in owners:
            await Upvote.create(upvoteable_id=owner.id, upvoteable_type=owner_type)
        await Image.create(
            url="logo.png", imageable_id=site.id, imageable_type="website"
        )
        for tag, tagged in [(orm, site), (rust, site), (rust, docs), (rust, docs)]:
            await Taggable.create(
                tag_id=tag.id, taggable_id=tagged.id, taggable_type="website"
            )

    # 3. Morph-one-or-many
    console.print("\n[bold yellow]--- Morph One or Many ---[/bold yellow]")

    show_step(
        "Collection query",
        "upvotes = await site.upvotes.all()  # .upvotes returns a Query object!",
    )
    upvotes = await site.upvotes.all()
    console.print(f"Upvotes on example.com: [bold green]{len(upvotes)}[/bold green]")
    console.print(f"[dim]{site.upvotes.to_sql()}[/dim]")

    show_step("Single object", "logo = await site.logo")
    logo = await site.logo
    console.print(f"Logo: [cyan]{logo.url}[/cyan]")

    # 4. Morph-to
    console.print("\n[bold yellow]--- Morph To ---[/bold yellow]")

    show_step(
        "Resolve the owner of each upvote",
        "for upvote in await Upvote.all():\n    owner = await upvote.upvoteable",
    )
    for upvote in await Upvote.all():
        owner = await upvote.upvoteable
        console.print(
            f"Upvote {upvote.id} -> [cyan]{type(owner).__name__}[/cyan] {owner.name}"
        )

    # 5. Morph-many-through
    console.print("\n[bold yellow]--- Morph Many Through ---[/bold yellow]")

    show_step("Tags of a website", "tags = await site.tags.order_by(Tag.name).all()")
    tags = await site.tags.order_by(Tag.name).all()
    console.print(f"example.com tags: [cyan]{[t.name for t in tags]}[/cyan]")

    show_step(
        "Websites of a tag (duplicate pivot rows collapse)",
        "sites = await rust.websites.all()",
    )
    sites = await rust.websites.all()
    console.print(f"Tagged rust: [cyan]{[s.name for s in sites]}[/cyan]")
    console.print(f"[dim]{rust.websites.to_sql()}[/dim]")

    # 6. Explicit resolution
    console.print("\n[bold yellow]--- Explicit Resolution ---[/bold yellow]")
    show_step(
        "relation() returns a tagged Association",
        'association = docs.relation("upvotes")\n'
        "upvotes = await association.fetch()",
    )
    association = docs.relation("upvotes")
    console.print(
        f"kind={association.kind.value} single={association.single} "
        f"rows={len(await association.fetch())}"
    )

    await reset_engine()
    console.print("\n[bold green]Demo Complete![/bold green]")


if __name__ == "__main__":
    import asyncio

    asyncio.run(run_demo())
