from __future__ import annotations

import pytest

from civicdesk.core.exceptions import CaptchaVerificationError
from civicdesk.services.cache.ttl_store import TTLStore
from civicdesk.services.base.service_result import ErrorCode
from civicdesk.services.captcha.captcha_service import CaptchaService

from .conftest import CAPTCHA_TEXT, FrozenClock, complaint_data


def _store(redis_client, clock=None) -> TTLStore:
    return TTLStore(redis_client, clock or FrozenClock(), prefix="test:ttl:")


def test_ttl_store_sets_redis_expiry(redis_client) -> None:
    store = _store(redis_client)
    store.put("k", "v", ttl_seconds=60)

    assert 0 < redis_client.ttl("test:ttl:k") <= 60


def test_ttl_store_expires_lazily(redis_client) -> None:
    clock = FrozenClock()
    store = _store(redis_client, clock)
    store.put("k", "v", ttl_seconds=60)

    assert store.get("k") == "v"
    clock.advance(seconds=60)
    assert store.get("k") is None
    assert len(store) == 0


def test_ttl_store_pop_is_one_shot(redis_client) -> None:
    store = _store(redis_client)
    store.put("k", "v", ttl_seconds=60)

    assert store.pop("k") == "v"
    assert store.pop("k") is None


def test_ttl_store_purge(redis_client) -> None:
    clock = FrozenClock()
    store = _store(redis_client, clock)
    store.put("old", 1, ttl_seconds=10)
    store.put("new", 2, ttl_seconds=100)
    redis_client.set("unrelated", "kept")
    clock.advance(seconds=50)

    assert store.purge_expired() == 1
    assert store.get("new") == 2
    assert redis_client.get("unrelated") == "kept"


def test_challenge_verifies_on_another_worker(redis_client, clock) -> None:
    issuing = CaptchaService(store=TTLStore(redis_client, clock, prefix="cap:"), ttl_seconds=300)
    verifying = CaptchaService(store=TTLStore(redis_client, clock, prefix="cap:"), ttl_seconds=300)

    challenge = issuing.issue()

    assert verifying.verify(challenge.challenge_id, challenge.text)
    assert not issuing.verify(challenge.challenge_id, challenge.text)


def test_answer_is_case_insensitive(captcha) -> None:
    challenge = captcha.issue()
    assert challenge.text == CAPTCHA_TEXT
    assert captcha.verify(challenge.challenge_id, f" {CAPTCHA_TEXT.lower()} ")


def test_challenge_is_consumed_by_first_attempt(captcha) -> None:
    challenge = captcha.issue()

    assert not captcha.verify(challenge.challenge_id, "nope")
    assert not captcha.verify(challenge.challenge_id, CAPTCHA_TEXT)


def test_expired_challenge_fails(captcha, clock) -> None:
    challenge = captcha.issue()
    clock.advance(seconds=301)

    with pytest.raises(CaptchaVerificationError) as exc:
        captcha.require(challenge.challenge_id, CAPTCHA_TEXT)
    assert exc.value.field == "captcha_answer"


def test_public_create_requires_captcha(workflow, seed) -> None:
    data = complaint_data(seed.ward.id, contact_email="someone@example.com")

    result = workflow.create_complaint(data, actor=None)

    assert result.error_code == ErrorCode.CAPTCHA_FAILED


def test_public_create_requires_contact(workflow, seed, captcha) -> None:
    challenge = captcha.issue()
    data = complaint_data(seed.ward.id, captcha_id=challenge.challenge_id, captcha_answer=CAPTCHA_TEXT)

    result = workflow.create_complaint(data, actor=None)

    assert result.error_code == ErrorCode.VALIDATION_ERROR
    assert result.error.rule == "contact_required"


def test_public_create_with_captcha(workflow, seed, captcha) -> None:
    challenge = captcha.issue()
    data = complaint_data(
        seed.ward.id,
        contact_phone="+91 98765 43210",
        captcha_id=challenge.challenge_id,
        captcha_answer=CAPTCHA_TEXT,
    )

    result = workflow.create_complaint(data, actor=None)

    assert result.is_success
    assert result.data.contact_phone == "+919876543210"
    assert result.data.submitted_by_id is None
