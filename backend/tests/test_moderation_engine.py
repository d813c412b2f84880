import uuid

import pytest

from blogcms.core.errors import CommentValidationError, InvalidStateError, NotFoundError
from blogcms.models import CommentStatus, PostStatus
from blogcms.services.classifier import Unavailable
from blogcms.services.moderation import AI_FALLBACK_REASON, SPAM_FILTER_REASON, CommentModerationEngine
from blogcms.services.notifier import NotificationResult

from conftest import FakeClassifier, FakeCommentStore, FakeNotifier, FakePostLookup, make_post, verdict

SPAMMY = "ofertas https://a.com https://b.com https://c.com"


def build(classifier_result=None, post=None, notifier=None):
    post = post or make_post()
    store = FakeCommentStore()
    classifier = FakeClassifier(classifier_result)
    notifier = notifier or FakeNotifier()
    engine = CommentModerationEngine(FakePostLookup(post), store, classifier, notifier)
    return engine, post, store, classifier, notifier


def payload(post, **overrides):
    data = {
        "post_id": post.id,
        "content": "Qué buena recomendación",
        "author_name": "Ana",
        "author_email": "ana@example.com",
    }
    data.update(overrides)
    return data


@pytest.mark.anyio
async def test_ai_approval_is_final():
    engine, post, store, classifier, notifier = build(verdict(True))

    comment = await engine.submit(payload(post))

    assert comment.status == CommentStatus.APPROVED.value
    assert comment.approved_by == "Agente IA"
    assert comment.rejection_reason is None
    assert len(store.inserts) == 1
    assert store.trust_lookups == []
    assert notifier.notices == []
    assert classifier.requests[0].post_title == post.title


@pytest.mark.anyio
async def test_ai_rejection_sends_one_notice_with_reason():
    engine, post, store, _, notifier = build(verdict(False, reason="Publicidad", category="spam"))

    comment = await engine.submit(payload(post, content="compra ya"))

    assert comment.status == CommentStatus.REJECTED.value
    assert comment.approved_by == "Agente IA"
    assert comment.rejection_reason == "Publicidad"
    assert len(notifier.notices) == 1
    notice = notifier.notices[0]
    assert notice.rejection_reason == "Publicidad"
    assert notice.post_title == post.title
    assert notice.comment_content == "compra ya"
    assert notice.author_email == "ana@example.com"


@pytest.mark.anyio
async def test_ai_rejection_without_reason_uses_fallback():
    engine, post, _, _, notifier = build(verdict(False, category="offensive"))
    comment = await engine.submit(payload(post))
    assert comment.rejection_reason == AI_FALLBACK_REASON
    assert notifier.notices[0].rejection_reason == AI_FALLBACK_REASON


@pytest.mark.anyio
async def test_ai_verdict_wins_over_spam_heuristic():
    engine, post, _, _, _ = build(verdict(True))
    comment = await engine.submit(payload(post, content=SPAMMY))
    assert comment.status == CommentStatus.APPROVED.value


@pytest.mark.anyio
async def test_unavailable_ai_and_spam_rejects_without_attribution_or_notice():
    engine, post, store, _, notifier = build(Unavailable("timeout"))

    comment = await engine.submit(payload(post, content=SPAMMY))

    assert comment.status == CommentStatus.REJECTED.value
    assert comment.rejection_reason == SPAM_FILTER_REASON
    assert comment.approved_by is None
    assert notifier.notices == []
    # the heuristic is final; history is not consulted
    assert store.trust_lookups == []


@pytest.mark.anyio
async def test_unavailable_ai_trusted_author_is_auto_approved():
    engine, post, store, _, _ = build(Unavailable("missing_credentials"))
    store.add("ana@example.com", CommentStatus.APPROVED)

    comment = await engine.submit(payload(post, author_email="  ANA@Example.com "))

    assert comment.status == CommentStatus.APPROVED.value
    assert comment.approved_by == "Auto-aprobado por historial"
    assert comment.author_email == "ana@example.com"
    assert store.trust_lookups == ["ana@example.com"]


@pytest.mark.anyio
async def test_unavailable_ai_unknown_author_waits_for_review():
    engine, post, store, _, notifier = build(Unavailable("http_500"))
    # rejected history does not count as trust
    store.add("ana@example.com", CommentStatus.REJECTED)

    comment = await engine.submit(payload(post))

    assert comment.status == CommentStatus.PENDING.value
    assert comment.approved_by is None
    assert comment.rejection_reason is None
    assert notifier.notices == []


@pytest.mark.anyio
@pytest.mark.parametrize("status", [PostStatus.DRAFT, PostStatus.ARCHIVED])
async def test_unpublished_post_rejects_before_any_work(status):
    engine, post, store, classifier, _ = build(verdict(True), post=make_post(status))

    with pytest.raises(InvalidStateError):
        await engine.submit(payload(post))

    assert store.inserts == []
    assert classifier.requests == []


@pytest.mark.anyio
async def test_missing_post_is_not_found():
    engine, _, store, classifier, _ = build(verdict(True))
    with pytest.raises(NotFoundError):
        await engine.submit({"post_id": uuid.uuid4(), "content": "hola", "author_name": "Ana", "author_email": "a@b.co"})
    assert store.inserts == []
    assert classifier.requests == []


@pytest.mark.anyio
async def test_invalid_input_fails_before_lookup():
    engine, post, store, classifier, _ = build(verdict(True))
    with pytest.raises(CommentValidationError) as exc:
        await engine.submit(payload(post, content="x" * 1001, author_email="nope"))
    assert len(exc.value.reasons) == 2
    assert store.inserts == []
    assert classifier.requests == []


@pytest.mark.anyio
async def test_notice_failure_never_changes_the_stored_status():
    engine, post, store, _, _ = build(
        verdict(False, reason="Ofensivo", category="offensive"),
        notifier=FakeNotifier(exc=RuntimeError("smtp down")),
    )
    comment = await engine.submit(payload(post))
    assert comment.status == CommentStatus.REJECTED.value
    assert len(store.inserts) == 1

    engine, post, store, _, notifier = build(
        verdict(False, reason="Ofensivo", category="offensive"),
        notifier=FakeNotifier(result=NotificationResult(success=False, error="http_500")),
    )
    comment = await engine.submit(payload(post))
    assert comment.status == CommentStatus.REJECTED.value
    assert len(notifier.notices) == 1
