import uuid

import pytest

from blogcms.core.errors import NotFoundError, PersistenceError
from blogcms.models import CommentStatus, PostStatus
from blogcms.services.store import NewComment, SqlCommentStore, SqlPostLookup

from conftest import make_post


def new(post, email="ana@example.com", status=CommentStatus.PENDING, **kw):
    return NewComment(post_id=post.id, content=kw.pop("content", "hola"), author_name="Ana",
                      author_email=email, status=status, **kw)


@pytest.mark.anyio
async def test_insert_and_lookup(sessionmaker):
    post = make_post()
    async with sessionmaker() as db:
        db.add(post)
        await db.commit()
        store = SqlCommentStore(db)

        assert (await SqlPostLookup(db).find_post(post.id)).title == post.title
        assert await SqlPostLookup(db).find_post(uuid.uuid4()) is None

        comment = await store.insert_comment(new(post, approved_by="Agente IA", status=CommentStatus.APPROVED))
        assert comment.id is not None
        assert comment.created_at is not None

    async with sessionmaker() as db:
        store = SqlCommentStore(db)
        found = await store.find_approved_comment_by_email("ana@example.com")
        assert found.id == comment.id
        assert found.approved_by == "Agente IA"
        assert await store.find_approved_comment_by_email("otro@example.com") is None


@pytest.mark.anyio
async def test_update_status_only_touches_attribution_when_given(sessionmaker):
    post = make_post()
    async with sessionmaker() as db:
        db.add(post)
        await db.commit()
        store = SqlCommentStore(db)
        comment = await store.insert_comment(
            new(post, status=CommentStatus.REJECTED, rejection_reason="detected as spam by basic filter")
        )

        updated = await store.update_comment_status(comment.id, CommentStatus.APPROVED, "gabi@blog.test")
        assert updated.approved_by == "gabi@blog.test"

        updated = await store.update_comment_status(comment.id, CommentStatus.PENDING)
        assert updated.status == CommentStatus.PENDING.value
        assert updated.approved_by == "gabi@blog.test"
        assert updated.rejection_reason == "detected as spam by basic filter"

        with pytest.raises(NotFoundError):
            await store.update_comment_status(uuid.uuid4(), CommentStatus.APPROVED)


@pytest.mark.anyio
async def test_listing_stats_and_delete(sessionmaker):
    popular, quiet = make_post(title="Popular"), make_post(title="Quiet")
    async with sessionmaker() as db:
        db.add_all([popular, quiet])
        await db.commit()
        store = SqlCommentStore(db)
        await store.insert_comment(new(popular, "a@example.com", CommentStatus.APPROVED))
        await store.insert_comment(new(popular, "b@example.com", CommentStatus.APPROVED))
        await store.insert_comment(new(quiet, "a@example.com", CommentStatus.APPROVED))
        pending = await store.insert_comment(new(quiet, "c@example.com", CommentStatus.PENDING))
        await store.insert_comment(new(quiet, "test@example.com", CommentStatus.REJECTED))

        stats = await store.stats()
        assert (stats.total, stats.approved, stats.pending, stats.rejected) == (5, 3, 1, 1)
        assert stats.unique_commenters == 4
        assert stats.most_commented_post == {"id": str(popular.id), "title": "Popular", "comments": 2}

        assert await store.count_pending() == 1
        assert [c.id for c, _ in await store.list_pending()] == [pending.id]
        assert len(await store.list_approved_for_post(popular.id)) == 2

        rows = await store.list_comments(post_id=quiet.id, author_email=" A@Example.com")
        assert [(c.author_email, title) for c, title in rows] == [("a@example.com", "Quiet")]
        assert len(await store.recent_approved(limit=2)) == 2

        await store.delete_comment(pending.id)
        assert await store.get_comment(pending.id) is None
        with pytest.raises(NotFoundError):
            await store.delete_comment(pending.id)


@pytest.mark.anyio
async def test_empty_stats(sessionmaker):
    async with sessionmaker() as db:
        stats = await SqlCommentStore(db).stats()
    assert stats.total == 0
    assert stats.most_commented_post is None


@pytest.mark.anyio
async def test_invalid_status_is_refused_by_the_database(sessionmaker):
    post = make_post(PostStatus.PUBLISHED)
    async with sessionmaker() as db:
        db.add(post)
        await db.commit()
        store = SqlCommentStore(db)
        comment = await store.insert_comment(new(post))
        comment.status = "SHADOWBANNED"
        with pytest.raises(PersistenceError):
            await store._commit("update_status")
