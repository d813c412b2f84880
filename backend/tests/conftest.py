import asyncio
import os
import uuid
from datetime import datetime, timezone

import pytest

# settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENV"] = "test"
os.environ["REDIS_URL"] = ""
os.environ["SUPERADMIN_TOKEN"] = "super-token"
os.environ["COLABORADOR_TOKEN"] = "colab-token"
os.environ["COMMENT_RATE_LIMIT"] = "1000/minute"
os.environ.pop("AI_GATEWAY_API_KEY", None)

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from blogcms.db.base import Base  # noqa: E402
from blogcms.models import Comment, CommentStatus, Post, PostStatus  # noqa: E402
from blogcms.services.classifier import Unavailable, Verdict  # noqa: E402
from blogcms.services.notifier import NotificationResult  # noqa: E402
from blogcms.services.validation import ModerationVerdict  # noqa: E402

SUPERADMIN = {"X-Admin-Token": "super-token"}
COLABORADOR = {"X-Admin-Token": "colab-token"}


def make_post(status: PostStatus = PostStatus.PUBLISHED, title: str = "Malbec de altura") -> Post:
    pid = uuid.uuid4()
    return Post(
        id=pid,
        title=title,
        slug=f"post-{pid.hex[:8]}",
        status=status.value,
        created_at=datetime.now(timezone.utc),
    )


def verdict(is_appropriate: bool, reason=None, category="appropriate", confidence=0.9) -> Verdict:
    return Verdict(
        ModerationVerdict(is_appropriate=is_appropriate, reason=reason, confidence=confidence, category=category)
    )


class FakePostLookup:
    def __init__(self, *posts: Post):
        self.posts = {p.id: p for p in posts}

    async def find_post(self, post_id):
        return self.posts.get(post_id)


class FakeCommentStore:
    def __init__(self):
        self.comments: dict[uuid.UUID, Comment] = {}
        self.inserts = []
        self.trust_lookups = []
        self.fail_ids: set = set()

    def add(self, email: str, status: CommentStatus, post_id=None, **fields) -> Comment:
        comment = Comment(
            id=uuid.uuid4(),
            post_id=post_id or uuid.uuid4(),
            content=fields.pop("content", "hola"),
            author_name=fields.pop("author_name", "Ana"),
            author_email=email,
            status=status.value,
            created_at=datetime.now(timezone.utc),
            **fields,
        )
        self.comments[comment.id] = comment
        return comment

    async def insert_comment(self, new):
        self.inserts.append(new)
        return self.add(
            new.author_email,
            new.status,
            post_id=new.post_id,
            content=new.content,
            author_name=new.author_name,
            approved_by=new.approved_by,
            rejection_reason=new.rejection_reason,
        )

    async def update_comment_status(self, comment_id, status, approved_by=None):
        from blogcms.core.errors import NotFoundError, PersistenceError

        if comment_id in self.fail_ids:
            raise PersistenceError("write failed")
        comment = self.comments.get(comment_id)
        if comment is None:
            raise NotFoundError("Comentario no encontrado")
        comment.status = status.value
        if approved_by is not None:
            comment.approved_by = approved_by
        return comment

    async def find_approved_comment_by_email(self, email):
        self.trust_lookups.append(email)
        for c in self.comments.values():
            if c.author_email == email and c.status == CommentStatus.APPROVED.value:
                return c
        return None

    async def delete_comment(self, comment_id):
        from blogcms.core.errors import NotFoundError

        if self.comments.pop(comment_id, None) is None:
            raise NotFoundError("Comentario no encontrado")


class FakeClassifier:
    def __init__(self, result=None, sentiment=None):
        self.result = result if result is not None else Unavailable("missing_credentials")
        self.sentiment = sentiment
        self.requests = []

    async def classify(self, request):
        self.requests.append(request)
        return self.result

    async def analyze_sentiment(self, content):
        return self.sentiment


class FakeNotifier:
    def __init__(self, result=None, exc: Exception | None = None):
        self.result = result or NotificationResult(success=True, message_id="fake")
        self.exc = exc
        self.notices = []

    async def send_rejection_notice(self, notice):
        self.notices.append(notice)
        if self.exc:
            raise self.exc
        return self.result


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sessionmaker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async def create_all():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(create_all())
    yield async_sessionmaker(engine, expire_on_commit=False)
    asyncio.run(engine.dispose())


@pytest.fixture
def seed(sessionmaker):
    """Insert ORM rows into the test database from sync code."""

    def _seed(*rows):
        async def run():
            async with sessionmaker() as db:
                db.add_all(rows)
                await db.commit()

        asyncio.run(run())
        return rows

    return _seed


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(sessionmaker, classifier, notifier):
    from blogcms.api.deps import get_classifier, get_notifier
    from blogcms.db.session import get_db
    from blogcms.main import app

    async def test_db():
        async with sessionmaker() as db:
            yield db

    app.dependency_overrides[get_db] = test_db
    app.dependency_overrides[get_classifier] = lambda: classifier
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
