"""
Direct CommentStore tests: validation order, pagination arithmetic,
transaction behaviour and the error taxonomy, without HTTP in the way.
"""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine

from comment_board.database import Base, Database
from comment_board.errors import (
    ContentRequired,
    InvalidID,
    NameRequired,
    NameTooLong,
    NotFound,
    StorageError,
    ValidationError,
)
from comment_board.models import Comment
from comment_board.pagination import PageSize
from comment_board.schemas import CommentCreate
from comment_board.services.comment_service import CommentStore


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _seed(store: CommentStore, count: int) -> list[int]:
    """Create *count* comments in order and return their ids."""
    ids = []
    for i in range(count):
        comment = await store.create_comment(CommentCreate(name=f"user{i}", content=f"comment {i}"))
        ids.append(comment.id)
    return ids


async def _row_count(database: Database) -> int:
    async with database.sessionmaker() as session:
        return (await session.execute(select(func.count()).select_from(Comment))).scalar_one()


# ---------------------------------------------------------------------------
# create_comment
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_comment_assigns_id_and_timestamps(store: CommentStore):
    comment = await store.create_comment(CommentCreate(name="Alice", content="hi"))
    assert comment.id == 1
    assert comment.name == "Alice"
    assert comment.content == "hi"
    assert comment.created_at is not None
    assert comment.updated_at is not None


@pytest.mark.asyncio
async def test_create_comment_ids_increase(store: CommentStore):
    ids = await _seed(store, 3)
    assert ids == sorted(ids)
    assert len(set(ids)) == 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name, content, error",
    [
        ("", "hello", NameRequired),
        ("", "", NameRequired),
        ("x" * 101, "", NameTooLong),
        ("x" * 101, "hello", NameTooLong),
        ("Bob", "", ContentRequired),
    ],
)
async def test_create_comment_validation_order(store: CommentStore, database: Database, name, content, error):
    with pytest.raises(error) as exc_info:
        await store.create_comment(CommentCreate(name=name, content=content))
    assert isinstance(exc_info.value, ValidationError)
    assert exc_info.value.status_code == 400
    assert await _row_count(database) == 0


@pytest.mark.asyncio
async def test_name_of_exactly_100_characters_is_accepted(store: CommentStore):
    comment = await store.create_comment(CommentCreate(name="n" * 100, content="x"))
    assert len(comment.name) == 100


@pytest.mark.asyncio
async def test_name_too_long_creates_nothing(store: CommentStore, database: Database):
    await _seed(store, 2)
    with pytest.raises(NameTooLong):
        await store.create_comment(CommentCreate(name="a" * 101, content="x"))
    assert await _row_count(database) == 2


@pytest.mark.asyncio
async def test_name_length_counts_characters_not_bytes(store: CommentStore):
    """100 two-byte characters (200 UTF-8 bytes) still fit; 101 do not."""
    comment = await store.create_comment(CommentCreate(name="é" * 100, content="x"))
    assert comment.name == "é" * 100

    with pytest.raises(NameTooLong):
        await store.create_comment(CommentCreate(name="é" * 101, content="x"))

    with pytest.raises(NameTooLong):
        await store.create_comment(CommentCreate(name="评" * 101, content="x"))


# ---------------------------------------------------------------------------
# get_comment
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_comment(store: CommentStore):
    created = await store.create_comment(CommentCreate(name="Alice", content="hi"))
    fetched = await store.get_comment(created.id)
    assert (fetched.id, fetched.name, fetched.content) == (created.id, "Alice", "hi")


@pytest.mark.asyncio
async def test_timestamps_read_back_as_utc(store: CommentStore):
    created = await store.create_comment(CommentCreate(name="Alice", content="hi"))
    fetched = await store.get_comment(created.id)
    (listed,) = (await store.list_comments(1, PageSize.limited(10))).comments

    for comment in (created, fetched, listed):
        assert comment.created_at.utcoffset() == timedelta(0)
    assert fetched.created_at == created.created_at == listed.created_at


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", [0, -1, 2**31, 10**20])
async def test_get_comment_invalid_id(store: CommentStore, bad_id):
    with pytest.raises(InvalidID):
        await store.get_comment(bad_id)


@pytest.mark.asyncio
async def test_get_comment_not_found_carries_id(store: CommentStore):
    with pytest.raises(NotFound) as exc_info:
        await store.get_comment(42)
    assert exc_info.value.comment_id == 42
    assert exc_info.value.status_code == 404


# ---------------------------------------------------------------------------
# delete_comment
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_comment(store: CommentStore, database: Database):
    (comment_id,) = await _seed(store, 1)
    assert await store.delete_comment(comment_id) is True
    assert await _row_count(database) == 0
    with pytest.raises(NotFound):
        await store.get_comment(comment_id)


@pytest.mark.asyncio
async def test_delete_missing_comment_reports_false(store: CommentStore):
    (comment_id,) = await _seed(store, 1)
    assert await store.delete_comment(comment_id) is True
    assert await store.delete_comment(comment_id) is False
    assert await store.delete_comment(9999) is False


@pytest.mark.asyncio
async def test_delete_zero_id_never_touches_storage(store: CommentStore, database: Database):
    await _seed(store, 1)
    # Even with the table gone, the id check fires first.
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    with pytest.raises(InvalidID):
        await store.delete_comment(0)


@pytest.mark.asyncio
async def test_delete_oversized_id_is_invalid(store: CommentStore):
    with pytest.raises(InvalidID):
        await store.delete_comment(2**31)


# ---------------------------------------------------------------------------
# list_comments
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_comments_empty(store: CommentStore):
    page = await store.list_comments(1, PageSize.limited(10))
    assert page.total == 0
    assert page.comments == []


@pytest.mark.asyncio
async def test_list_comments_newest_first(store: CommentStore):
    ids = await _seed(store, 5)
    page = await store.list_comments(1, PageSize.limited(10))
    assert page.total == 5
    assert [c.id for c in page.comments] == list(reversed(ids))


@pytest.mark.asyncio
async def test_list_comments_total_ignores_page_size(store: CommentStore):
    await _seed(store, 5)
    page = await store.list_comments(2, PageSize.limited(2))
    assert page.total == 5
    assert len(page.comments) == 2


@pytest.mark.asyncio
async def test_list_comments_pages_partition_all_rows(store: CommentStore):
    ids = await _seed(store, 7)

    collected = []
    page_number = 1
    while True:
        page = await store.list_comments(page_number, PageSize.limited(3))
        assert page.total == 7
        if not page.comments:
            break
        collected.extend(c.id for c in page.comments)
        page_number += 1

    assert page_number == 4
    assert collected == list(reversed(ids))


@pytest.mark.asyncio
async def test_list_comments_unlimited_matches_paged_order(store: CommentStore):
    await _seed(store, 6)
    everything = await store.list_comments(1, PageSize.unlimited())
    assert everything.total == 6
    assert len(everything.comments) == 6

    first = await store.list_comments(1, PageSize.limited(3))
    second = await store.list_comments(2, PageSize.limited(3))
    assert everything.comments == first.comments + second.comments


@pytest.mark.asyncio
async def test_list_comments_unlimited_ignores_page(store: CommentStore):
    await _seed(store, 3)
    page = await store.list_comments(5, PageSize.unlimited())
    assert len(page.comments) == 3


@pytest.mark.asyncio
async def test_list_comments_is_idempotent(store: CommentStore):
    await _seed(store, 4)
    first = await store.list_comments(1, PageSize.limited(3))
    second = await store.list_comments(1, PageSize.limited(3))
    assert first == second


@pytest.mark.asyncio
async def test_list_comments_equal_timestamps_break_ties_by_id(store: CommentStore, database: Database):
    stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
    async with database.sessionmaker() as session, session.begin():
        session.add_all(
            Comment(name=f"tie{i}", content="same time", created_at=stamp, updated_at=stamp)
            for i in range(4)
        )

    first = await store.list_comments(1, PageSize.limited(2))
    second = await store.list_comments(2, PageSize.limited(2))
    assert [c.id for c in first.comments + second.comments] == [4, 3, 2, 1]


@pytest.mark.asyncio
async def test_list_comments_page_below_one_is_first_page(store: CommentStore):
    await _seed(store, 3)
    clamped = await store.list_comments(0, PageSize.limited(2))
    first = await store.list_comments(1, PageSize.limited(2))
    assert clamped == first


# ---------------------------------------------------------------------------
# Storage failures
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_storage_failure_is_wrapped(store: CommentStore, database: Database):
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    with pytest.raises(StorageError) as exc_info:
        await store.list_comments(1, PageSize.limited(10))
    assert isinstance(exc_info.value.__cause__, SQLAlchemyError)
    assert exc_info.value.status_code == 500

    with pytest.raises(StorageError):
        await store.create_comment(CommentCreate(name="Alice", content="hi"))
    with pytest.raises(StorageError):
        await store.get_comment(1)
    with pytest.raises(StorageError):
        await store.delete_comment(1)


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_concurrent_creates_get_distinct_ids(tmp_path):
    """Parallel creates against a file database each commit their own row."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'concurrent.db'}")
    database = Database(engine)
    await database.create_all()
    store = CommentStore(database.sessionmaker)
    try:
        created = await asyncio.gather(
            *(store.create_comment(CommentCreate(name=f"writer{i}", content="hi")) for i in range(10))
        )
        assert len({c.id for c in created}) == 10

        page = await store.list_comments(1, PageSize.unlimited())
        assert page.total == 10
    finally:
        await database.dispose()


# ---------------------------------------------------------------------------
# End-to-end lifecycle
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_comment_lifecycle(store: CommentStore):
    created = await store.create_comment(CommentCreate(name="Alice", content="hi"))
    assert created.id == 1

    page = await store.list_comments(1, PageSize.limited(10))
    assert page.total == 1
    assert page.comments[0].name == "Alice"
    assert page.comments[0].content == "hi"

    assert await store.delete_comment(1) is True
    with pytest.raises(NotFound):
        await store.get_comment(1)

    page = await store.list_comments(1, PageSize.limited(10))
    assert page.total == 0
    assert page.comments == []
