"""Integration tests for SqlVoteRepository.

These tests run the repository against an in-memory SQLite database to
verify the SQL it emits and the row mapping.
"""

from datetime import datetime
from uuid import uuid4

import pytest
from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError

from voting.domain.model import Vote
from voting.domain.value import VoteableRef, VoteId, VoterId
from voting.persistence.repository import SqlVoteRepository
from tests.entities import users_table


async def make_voter(session) -> VoterId:
    voter_id = uuid4()
    await session.execute(
        insert(users_table).values(id=voter_id, handle=f"user-{voter_id.hex[:8]}")
    )
    return voter_id


def make_vote(voter_id: VoterId, voteable: VoteableRef, upvote: bool = True) -> Vote:
    return Vote(
        id=VoteId(uuid4()),
        voter_type="user",
        voter_id=voter_id,
        voteable_type=voteable.type,
        voteable_id=voteable.id,
        upvote=upvote,
    )


def post_ref() -> VoteableRef:
    return VoteableRef(type="post", id=uuid4())


class TestVoteRepositoryIntegration:
    """Integration tests for SqlVoteRepository."""

    @pytest.mark.asyncio
    async def test_save_and_find(self, sqlite_session, schema):
        # Arrange
        repo = SqlVoteRepository(sqlite_session, schema)
        voter_id = await make_voter(sqlite_session)
        post = post_ref()
        vote = make_vote(voter_id, post, upvote=False)

        # Act
        await repo.save(vote)

        # Assert
        by_id = await repo.find_by_id(vote.id)
        assert by_id is not None
        assert by_id.id == vote.id
        assert by_id.voter_id == voter_id
        assert by_id.voteable == post
        assert by_id.upvote is False

        by_pair = await repo.find_by_voter_and_voteable(voter_id, post)
        assert by_pair is not None
        assert by_pair.id == vote.id

    @pytest.mark.asyncio
    async def test_missing_vote_returns_none(self, sqlite_session, schema):
        repo = SqlVoteRepository(sqlite_session, schema)

        assert await repo.find_by_id(VoteId(uuid4())) is None
        assert (
            await repo.find_by_voter_and_voteable(uuid4(), post_ref())
            is None
        )

    @pytest.mark.asyncio
    async def test_duplicate_vote_violates_unique_constraint(
        self, sqlite_session, schema
    ):
        """Only one vote per voter and subject may exist."""
        repo = SqlVoteRepository(sqlite_session, schema)
        voter_id = await make_voter(sqlite_session)
        post = post_ref()
        await repo.save(make_vote(voter_id, post))

        with pytest.raises(IntegrityError):
            await repo.save(make_vote(voter_id, post, upvote=False))

    @pytest.mark.asyncio
    async def test_counts_by_direction_and_voter(self, sqlite_session, schema):
        # Arrange
        repo = SqlVoteRepository(sqlite_session, schema)
        alice = await make_voter(sqlite_session)
        bob = await make_voter(sqlite_session)
        carol = await make_voter(sqlite_session)
        post, other = post_ref(), post_ref()
        await repo.save(make_vote(alice, post, upvote=True))
        await repo.save(make_vote(bob, post, upvote=True))
        await repo.save(make_vote(carol, post, upvote=False))
        await repo.save(make_vote(alice, other, upvote=False))

        # Act / Assert
        assert await repo.count_by_voteable(post) == 3
        assert await repo.count_by_voteable(post, upvote=True) == 2
        assert await repo.count_by_voteable(post, upvote=False) == 1
        assert await repo.count_by_voteable(post, voter_id=carol, upvote=False) == 1
        assert await repo.count_by_voteable(post, voter_id=carol, upvote=True) == 0
        assert await repo.count_by_voteable(other) == 1

    @pytest.mark.asyncio
    async def test_subject_type_is_part_of_the_scope(self, sqlite_session, schema):
        """A comment and a post sharing an id do not share votes."""
        repo = SqlVoteRepository(sqlite_session, schema)
        voter_id = await make_voter(sqlite_session)
        shared_id = uuid4()
        post = VoteableRef(type="post", id=shared_id)
        comment = VoteableRef(type="comment", id=shared_id)
        await repo.save(make_vote(voter_id, post))

        assert await repo.count_by_voteable(post) == 1
        assert await repo.count_by_voteable(comment) == 0
        assert await repo.find_by_voter_and_voteable(voter_id, comment) is None

    @pytest.mark.asyncio
    async def test_find_by_voteable_and_voter(self, sqlite_session, schema):
        repo = SqlVoteRepository(sqlite_session, schema)
        alice = await make_voter(sqlite_session)
        bob = await make_voter(sqlite_session)
        post, other = post_ref(), post_ref()
        await repo.save(make_vote(alice, post, upvote=True))
        await repo.save(make_vote(bob, post, upvote=False))
        await repo.save(make_vote(alice, other))

        downvotes = await repo.find_by_voteable(post, upvote=False)
        alice_votes = await repo.find_by_voter(alice)

        assert [v.voter_id for v in downvotes] == [bob]
        assert {v.voteable for v in alice_votes} == {post, other}

    @pytest.mark.asyncio
    async def test_find_voters_returns_pivot_data(self, sqlite_session, schema):
        repo = SqlVoteRepository(sqlite_session, schema)
        alice = await make_voter(sqlite_session)
        bob = await make_voter(sqlite_session)
        post = post_ref()
        await repo.save(make_vote(alice, post, upvote=True))
        await repo.save(make_vote(bob, post, upvote=False))

        voters = await repo.find_voters(post)
        upvoters = await repo.find_voters(post, upvote=True)

        assert {(p.voter_id, p.upvote) for p in voters} == {
            (alice, True),
            (bob, False),
        }
        assert [p.voter_id for p in upvoters] == [alice]
        assert all(isinstance(p.created_at, datetime) for p in voters)

    @pytest.mark.asyncio
    async def test_update_direction(self, sqlite_session, schema):
        # Arrange
        repo = SqlVoteRepository(sqlite_session, schema)
        voter_id = await make_voter(sqlite_session)
        vote = make_vote(voter_id, post_ref(), upvote=True)
        await repo.save(vote)

        # Act
        updated = await repo.update_direction(vote.id, upvote=False)

        # Assert
        assert updated is not None
        assert updated.id == vote.id
        assert updated.upvote is False
        assert await repo.update_direction(VoteId(uuid4()), upvote=True) is None

    @pytest.mark.asyncio
    async def test_delete(self, sqlite_session, schema):
        repo = SqlVoteRepository(sqlite_session, schema)
        voter_id = await make_voter(sqlite_session)
        post, other = post_ref(), post_ref()
        first = make_vote(voter_id, post)
        await repo.save(first)
        await repo.save(make_vote(voter_id, other))

        await repo.delete(first.id)

        assert await repo.find_by_id(first.id) is None
        assert await repo.delete_by_voter_and_voteable(voter_id, other) is True
        assert await repo.delete_by_voter_and_voteable(voter_id, other) is False
        assert await repo.find_by_voter(voter_id) == []
