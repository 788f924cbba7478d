from __future__ import annotations

import logging

from civicdesk.core.logging import (
    RedactingFilter,
    RequestContextFilter,
    RequestContextProcessor,
    actor_id,
    get_logger,
    redact,
    request_id,
)


def test_redact_masks_credentials_recursively() -> None:
    values = redact(
        {
            "sequence_code": "KSC0001",
            "otp_session_id": "abc",
            "payload": {"code": "123456", "expires_in_minutes": 10},
            "captcha_answer": "AB3CD",
        }
    )

    assert values["sequence_code"] == "KSC0001"
    assert values["otp_session_id"] == "abc"
    assert values["payload"] == {"code": "[REDACTED]", "expires_in_minutes": 10}
    assert values["captcha_answer"] == "[REDACTED]"


def test_filter_redacts_extra_payloads() -> None:
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "dispatch", None, None)
    record.payload = {"code": "654321"}
    record.secret_key = "s3cret"

    assert RedactingFilter().filter(record)
    assert record.payload == {"code": "[REDACTED]"}
    assert record.secret_key == "[REDACTED]"


def test_adapter_redacts_before_emitting(caplog) -> None:
    logger = get_logger("civicdesk.tests")
    with caplog.at_level(logging.INFO, logger="civicdesk.tests"):
        logger.add_context(component="binder").info("Issued", extra={"payload": {"code": "999999"}})

    record = caplog.records[-1]
    assert record.payload == {"code": "[REDACTED]"}
    assert record.component == "binder"


def test_adapter_records_carry_request_and_actor(caplog) -> None:
    logger = get_logger("civicdesk.tests")
    request_token = request_id.set("req-1")
    actor_token = actor_id.set("user-1")
    try:
        with caplog.at_level(logging.INFO, logger="civicdesk.tests"):
            logger.info("Transition applied")
    finally:
        actor_id.reset(actor_token)
        request_id.reset(request_token)

    record = caplog.records[-1]
    assert record.request_id == "req-1"
    assert record.actor_id == "user-1"


def test_context_filter_stamps_foreign_records() -> None:
    record = logging.LogRecord("sqlalchemy.engine", logging.INFO, __file__, 1, "select", None, None)
    token = actor_id.set("user-2")
    try:
        assert RequestContextFilter().filter(record)
    finally:
        actor_id.reset(token)

    assert record.actor_id == "user-2"
    assert not hasattr(record, "request_id")


def test_struct_processor_adds_context() -> None:
    token = actor_id.set("user-3")
    try:
        event = RequestContextProcessor()(None, "info", {"event": "request_completed"})
    finally:
        actor_id.reset(token)

    assert event["actor_id"] == "user-3"
    assert event["service"] == "civicdesk"
    assert "request_id" not in event
