import json
import logging

from reply_gateway.core.logging import (
    JsonLogFormatter,
    RequestContextFilter,
    bind_platform,
    bind_request_id,
    reset_platform,
    reset_request_id,
)


def _record(**extra):
    record = logging.LogRecord(
        name="reply_gateway.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Directive %s failed",
        args=("alexaCard",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_turn_context():
    request_token = bind_request_id("req-1")
    platform_token = bind_platform("alexa")
    try:
        record = _record(error_kind="exclusivity_violation")
        RequestContextFilter().filter(record)
        entry = json.loads(JsonLogFormatter().format(record))
    finally:
        reset_platform(platform_token)
        reset_request_id(request_token)

    assert entry["message"] == "Directive alexaCard failed"
    assert entry["level"] == "WARNING"
    assert entry["request_id"] == "req-1"
    assert entry["platform"] == "alexa"
    assert entry["error_kind"] == "exclusivity_violation"
    assert entry["environment"] == "test"


def test_filter_keeps_explicit_platform():
    record = _record(platform="dialogflow")

    RequestContextFilter().filter(record)

    assert record.platform == "dialogflow"
    assert record.request_id == "-"
