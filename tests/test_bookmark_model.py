"""Unit tests for the Bookmark model and BookmarkRecord."""

import dataclasses
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Bookmark, BookmarkRecord, Identity
from app.models.bookmark import BOOKMARKS_TABLE, OWNER_COLUMN


@pytest.mark.asyncio
async def test_create_bookmark(db_session: AsyncSession):
    """Test creating a basic bookmark row."""
    bookmark = Bookmark(
        id="b-1",
        user_id="user-1",
        url="https://example.com",
        title="Example",
    )
    db_session.add(bookmark)
    await db_session.commit()
    await db_session.refresh(bookmark)

    assert bookmark.id == "b-1"
    assert bookmark.user_id == "user-1"
    assert bookmark.created_at is not None


@pytest.mark.asyncio
async def test_query_bookmarks_by_owner(db_session: AsyncSession):
    """Test querying bookmarks for a specific owner."""
    db_session.add_all([
        Bookmark(id="b-1", user_id="user-1", url="https://a.example", title="A"),
        Bookmark(id="b-2", user_id="user-1", url="https://b.example", title="B"),
        Bookmark(id="b-3", user_id="user-2", url="https://c.example", title="C"),
    ])
    await db_session.commit()

    result = await db_session.execute(select(Bookmark).where(Bookmark.user_id == "user-1"))
    assert len(result.scalars().all()) == 2

    result = await db_session.execute(select(Bookmark).where(Bookmark.user_id == "user-2"))
    assert len(result.scalars().all()) == 1


@pytest.mark.asyncio
async def test_duplicate_id_rejected(db_session: AsyncSession):
    """Test that two rows cannot share an id."""
    db_session.add(Bookmark(id="dup", user_id="user-1", url="https://a.example", title="A"))
    await db_session.commit()
    db_session.expunge_all()

    db_session.add(Bookmark(id="dup", user_id="user-1", url="https://b.example", title="B"))
    with pytest.raises(IntegrityError):
        await db_session.commit()



def test_table_and_owner_column_shared_with_sync():
    """The sync layer filters on the same table and owner column the model defines."""
    from app.sync import mutations, subscription

    assert Bookmark.__tablename__ == BOOKMARKS_TABLE
    assert OWNER_COLUMN in Bookmark.__table__.columns
    assert subscription.OWNER_COLUMN is OWNER_COLUMN
    assert mutations.OWNER_COLUMN is OWNER_COLUMN
    assert subscription.SubscriptionManager.__init__.__defaults__ == (BOOKMARKS_TABLE,)

@pytest.mark.asyncio
async def test_to_row(db_session: AsyncSession):
    """Test the plain row shape."""
    created = datetime(2024, 5, 1, 12, 0, 0)
    bookmark = Bookmark(
        id="b-1", user_id="user-1", url="https://example.com", title="Example", created_at=created
    )
    db_session.add(bookmark)
    await db_session.commit()

    assert bookmark.to_row() == {
        "id": "b-1",
        "user_id": "user-1",
        "url": "https://example.com",
        "title": "Example",
        "created_at": created,
    }


class TestBookmarkRecord:
    """Tests for BookmarkRecord."""

    def test_from_row_with_datetime(self):
        created = datetime(2024, 5, 1, 12, 0, 0)
        record = BookmarkRecord.from_row({
            "id": "b-1",
            "user_id": "user-1",
            "url": "https://example.com",
            "title": "Example",
            "created_at": created,
        })

        assert record.id == "b-1"
        assert record.created_at == created

    def test_from_row_parses_iso_timestamp(self):
        """Platform payloads carry ISO timestamps with a Z suffix."""
        record = BookmarkRecord.from_row({
            "id": 42,
            "user_id": "user-1",
            "url": "https://example.com",
            "title": "Example",
            "created_at": "2024-05-01T12:00:00Z",
        })

        assert record.id == "42"
        assert record.created_at == datetime(2024, 5, 1, 12, 0, 0)
        assert record.created_at.tzinfo is None

    def test_from_row_normalizes_offsets_to_utc(self):
        aware = datetime(2024, 5, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        record = BookmarkRecord.from_row({
            "id": "b-1",
            "user_id": "user-1",
            "url": "https://example.com",
            "title": "Example",
            "created_at": aware,
        })

        assert record.created_at == datetime(2024, 5, 1, 12, 0, 0)

    def test_record_is_immutable(self):
        record = BookmarkRecord(
            id="b-1",
            url="https://example.com",
            title="Example",
            created_at=datetime(2024, 5, 1),
            user_id="user-1",
        )

        with pytest.raises(dataclasses.FrozenInstanceError):
            record.title = "Changed"


class TestIdentity:
    """Tests for Identity."""

    def test_from_user(self):
        identity = Identity.from_user({"id": "abc", "email": "a@example.com", "role": "authenticated"})
        assert identity == Identity(id="abc", email="a@example.com")

    def test_equality_by_value(self):
        assert Identity(id="abc") == Identity(id="abc")
        assert Identity(id="abc") != Identity(id="xyz")
