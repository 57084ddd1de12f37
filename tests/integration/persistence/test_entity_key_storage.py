"""Integration tests for integer and string keys on SQLite.

Subject keys are stored as text in the vote table; reads convert them back
to the subject's key type and filters compare against the subject's own
key column.
"""

import pytest
import pytest_asyncio
from sqlalchemy import Column, Integer, MetaData, String, Table, insert, select

from voting.config import DatabaseSettings, Settings, VoteSettings
from voting.domain.model.common import DomainModel
from voting.domain.service import Voteable, VoteService
from voting.persistence.database import create_engine, create_session_factory
from voting.persistence.registry import EntityRegistry
from voting.persistence.repository import SqlVoteRepository
from voting.persistence.tables import VoteSchema
from tests.entities import Post, posts_table


class Member(DomainModel):
    id: int


class Article(DomainModel):
    id: int


class Tag(DomainModel):
    slug: str


@pytest_asyncio.fixture
async def keyed_service():
    """Vote service on a database of integer and string keyed entities."""
    metadata = MetaData()
    members = Table("members", metadata, Column("id", Integer, primary_key=True))
    articles = Table("articles", metadata, Column("id", Integer, primary_key=True))
    tags = Table("tags", metadata, Column("slug", String(50), primary_key=True))
    uuid_posts = posts_table.to_metadata(metadata)

    registry = EntityRegistry()
    registry.register("user", Member, members)
    registry.register("article", Article, articles)
    registry.register("tag", Tag, tags, key="slug")
    registry.register("post", Post, uuid_posts)
    schema = VoteSchema.build(VoteSettings(), registry)

    settings = Settings(
        environment="test",
        database=DatabaseSettings(url="sqlite+aiosqlite://"),
    )
    engine = create_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    async with create_session_factory(engine)() as session:
        await session.execute(insert(members), [{"id": 1}, {"id": 2}])
        await session.execute(insert(articles), [{"id": 10}, {"id": 11}])
        await session.execute(insert(tags), [{"slug": "python"}, {"slug": "sql"}])
        yield VoteService(SqlVoteRepository(session, schema), schema), session

    await engine.dispose()


class TestIntegerKeys:
    """Integer keyed voters and subjects."""

    @pytest.mark.asyncio
    async def test_votes_read_back_with_integer_keys(self, keyed_service):
        # Arrange
        vote_service, _ = keyed_service
        member = Member(id=1)

        # Act
        await vote_service.upvote(member, Article(id=10))
        votes = await vote_service.votes_by(member)

        # Assert
        assert [(v.voter_id, v.voteable_id) for v in votes] == [(1, 10)]
        assert await vote_service.voteable(Article(id=10)).is_upvoted_by(member)

    @pytest.mark.asyncio
    async def test_filter_predicates_match_integer_subjects(self, keyed_service):
        vote_service, session = keyed_service
        member = Member(id=1)
        await vote_service.downvote(member, Article(id=11))
        scopes = Voteable.scopes(vote_service.schema, "article")
        articles = vote_service.schema.registry.entity("article").table

        voted = await session.execute(
            select(articles.c.id).where(scopes.where_downvoted_by(member))
        )
        not_voted = await session.execute(
            select(articles.c.id).where(scopes.where_not_voted_by(member))
        )

        assert voted.scalars().all() == [11]
        assert not_voted.scalars().all() == [10]

    @pytest.mark.asyncio
    async def test_voters_relation_joins_integer_voters(self, keyed_service):
        vote_service, session = keyed_service
        await vote_service.upvote(Member(id=1), Article(id=10))
        await vote_service.downvote(Member(id=2), Article(id=10))

        rows = (
            await session.execute(vote_service.voteable(Article(id=10)).upvoters())
        ).mappings().all()

        assert [(row["id"], row["pivot_upvote"]) for row in rows] == [(1, True)]


class TestMixedKeys:
    """String and UUID subjects share the same vote table."""

    @pytest.mark.asyncio
    async def test_string_keyed_subject(self, keyed_service):
        vote_service, session = keyed_service
        member = Member(id=2)
        await vote_service.upvote(member, Tag(slug="sql"))
        tags = vote_service.schema.registry.entity("tag").table

        result = await session.execute(
            select(tags.c.slug).where(
                Voteable.scopes(vote_service.schema, "tag").where_voted_by(member)
            )
        )

        assert result.scalars().all() == ["sql"]
        assert await vote_service.voteable(Tag(slug="sql")).voters_count() == 1

    @pytest.mark.asyncio
    async def test_uuid_keyed_subject(self, keyed_service):
        """UUID keys stored as text still match the subject's Uuid column."""
        vote_service, session = keyed_service
        member = Member(id=1)
        post = Post()
        posts = vote_service.schema.registry.entity("post").table
        await session.execute(insert(posts).values(id=post.id, title=post.title))
        await vote_service.upvote(member, post)

        result = await session.execute(
            select(posts.c.id).where(
                Voteable.scopes(vote_service.schema, "post").where_upvoted_by(member)
            )
        )
        (vote,) = await vote_service.votes_by(member)

        assert result.scalars().all() == [post.id]
        assert vote.voteable_id == post.id
